import numpy as np
import pytest

from formant_analyzer import constants as c
from formant_analyzer.models.formant.types import ChunkPower, IndexRange
from formant_analyzer.services import preprocessing


def _chunks(powers, size=10):
    return [ChunkPower(IndexRange(i * size, i * size + size - 1), p) for i, p in enumerate(powers)]


def test_resample_changes_length_by_rate_ratio():
    t = np.arange(16000) / 16000
    signal = np.sin(2 * np.pi * 440 * t)

    resampled = preprocessing.resample(signal, 16000, 10000)

    assert resampled.size == 10000
    assert resampled.dtype == np.float64


def test_resample_same_rate_returns_copy():
    signal = np.linspace(-1, 1, 100)

    resampled = preprocessing.resample(signal, 10000, 10000)

    assert resampled is not signal
    np.testing.assert_array_equal(resampled, signal)


@pytest.mark.parametrize("samples, from_rate", [([], 16000), ([0.1, 0.2], 0), ([0.1, 0.2], -5)])
def test_resample_degenerate_input_is_empty(samples, from_rate):
    assert preprocessing.resample(samples, from_rate, 10000).size == 0


def test_preemphasize_first_difference():
    result = preprocessing.preemphasize(np.array([1.0, 2.0, 3.0]), 0.5)

    np.testing.assert_allclose(result, [1.0, 1.5, 2.0])


def test_preemphasize_zero_coefficient_is_identity():
    signal = np.array([0.3, -0.2, 0.1])

    result = preprocessing.preemphasize(signal, 0.0)

    np.testing.assert_array_equal(result, signal)
    assert result is not signal


def test_frame_energy_includes_partial_last_chunk():
    chunk_powers = preprocessing.frame_energy(np.full(25, 2.0), 1000, 0.01)

    assert [chunk.indices for chunk in chunk_powers] == [IndexRange(0, 9), IndexRange(10, 19), IndexRange(20, 24)]
    assert all(chunk.rms_power == pytest.approx(2.0) for chunk in chunk_powers)


def test_frame_energy_empty_input():
    assert preprocessing.frame_energy(np.array([]), 1000, 0.01) == []
    assert preprocessing.frame_energy(np.ones(10), 1000, 0.0) == []


def test_find_voiced_range_spans_strong_chunks():
    voiced = preprocessing.find_voiced_range(_chunks([0.0, 1.0, 5.0, 0.4, 0.0]), 0.1)

    assert voiced == IndexRange(10, 29)


def test_find_voiced_range_threshold_is_inclusive():
    voiced = preprocessing.find_voiced_range(_chunks([0.5, 5.0, 0.5]), 0.1)

    assert voiced == IndexRange(0, 29)


def test_find_voiced_range_silence():
    assert preprocessing.find_voiced_range(_chunks([0.0, 0.0]), 0.1) is None
    assert preprocessing.find_voiced_range([], 0.1) is None


def test_trim_range_symmetric():
    assert preprocessing.trim_range(IndexRange(0, 99), 0.1) == IndexRange(10, 89)
    assert preprocessing.trim_range(IndexRange(0, 99), 0.0) == IndexRange(0, 99)


def test_trim_range_degenerates_to_single_point():
    trimmed = preprocessing.trim_range(IndexRange(0, 99), 0.5)

    assert trimmed == IndexRange(50, 50)
    assert len(trimmed) == 1


def test_cosine_window_shapes():
    np.testing.assert_allclose(preprocessing.cosine_window(8, c.RECTANGULAR_ALPHA), np.ones(8))

    hamming = preprocessing.cosine_window(11, c.HAMMING_ALPHA)
    assert hamming[0] == pytest.approx(4 / 46)
    assert hamming[5] == pytest.approx(1.0)
    np.testing.assert_allclose(hamming, hamming[::-1])

    hann = preprocessing.cosine_window(11, c.HANN_ALPHA)
    assert hann[0] == pytest.approx(0.0, abs=1e-12)


def test_apply_window_does_not_modify_input():
    samples = np.ones(16)

    windowed = preprocessing.apply_window(samples, c.HAMMING_ALPHA)

    np.testing.assert_array_equal(samples, np.ones(16))
    assert windowed[0] < 1.0


def test_decimation_factor():
    assert preprocessing.decimation_factor(44100) == 4
    assert preprocessing.decimation_factor(8000) == 1


def test_decimate_keeps_first_of_every_step():
    np.testing.assert_array_equal(preprocessing.decimate(np.arange(10), 4), [0, 4, 8])
    assert preprocessing.decimate(np.arange(10), 0).size == 0


def test_find_strong_part():
    samples = np.zeros(3000)
    samples[1000:2000] = 0.5

    assert preprocessing.find_strong_part(samples, 300, 0.1) == (1000, 2000)
    assert preprocessing.find_strong_part(np.array([]), 300, 0.1) == (0, 0)


def test_truncate_tails_rounds_half_up():
    assert preprocessing.truncate_tails(0, 100, 0.15) == (15, 85)
    assert preprocessing.truncate_tails(22264, 36542, 0.15) == (24406, 34400)


def test_downsample_peaks():
    samples = np.array([1, 5, 2, 8, 3, 0])

    np.testing.assert_array_equal(preprocessing.downsample_peaks(samples, 3), [5, 8, 3])
    np.testing.assert_array_equal(preprocessing.downsample_peaks(samples, 10), samples)
    assert preprocessing.downsample_peaks(samples, 0).size == 0
