import dataclasses

import numpy as np
import pytest

from conftest import VOWEL_FORMANTS
from formant_analyzer import AnalysisConfig, analyze
from formant_analyzer.config import hz_to_mel
from formant_analyzer.models.formant.core import FormantAnalyzer, get_formant_analyzer
from formant_analyzer.models.formant.response import lpc_frequency_response


def _closest(formants, target):
    return min(formants, key=lambda f: abs(f - target))


def test_analyze_finds_vowel_formants(vowel):
    samples, rate = vowel

    result = analyze(samples, rate)

    frequencies = result.formant_frequencies
    for target in VOWEL_FORMANTS:
        assert _closest(frequencies, target) == pytest.approx(target, rel=0.1)


def test_formants_are_sorted_separated_and_in_q_range(vowel):
    samples, rate = vowel
    config = AnalysisConfig()

    result = analyze(samples, rate, config)

    frequencies = result.formant_frequencies
    assert frequencies == sorted(frequencies)
    assert np.all(np.diff(hz_to_mel(frequencies)) >= config.min_formant_separation_mel)
    assert all(config.min_q <= f.q <= config.max_q for f in result.formants)
    assert all(f.frequency > config.min_formant_frequency for f in result.formants)


def test_lpc_response_peaks_at_estimated_formants(vowel):
    samples, rate = vowel
    result = analyze(samples, rate)
    step = 10.0

    for target in VOWEL_FORMANTS:
        formant = _closest(result.formant_frequencies, target)
        grid = formant + step * np.arange(-30, 31)
        response = lpc_frequency_response(result.lpc_coefficients, result.lpc_gain, 10000.0, grid)
        assert abs(int(np.argmax(response)) - 30) <= 1


def test_root_finders_agree(vowel):
    samples, rate = vowel

    companion = analyze(samples, rate, AnalysisConfig(root_finder="companion"))
    laguerre = analyze(samples, rate, AnalysisConfig(root_finder="laguerre"))

    assert laguerre.formant_frequencies == pytest.approx(companion.formant_frequencies, rel=1e-6)


def test_analysis_is_deterministic_and_does_not_modify_input(vowel):
    samples, rate = vowel
    original = samples.copy()

    first = analyze(samples, rate)
    second = analyze(samples, rate)

    np.testing.assert_array_equal(samples, original)
    assert first.formant_frequencies == second.formant_frequencies
    np.testing.assert_array_equal(first.lpc_coefficients, second.lpc_coefficients)


def test_result_artefacts(vowel):
    samples, rate = vowel
    config = AnalysisConfig()

    result = analyze(samples, rate, config)

    assert result.configuration is config
    assert result.original_sample_rate == rate
    assert result.resampled_samples.size == int(samples.size * config.resample_rate / rate)
    assert result.lpc_coefficients.size == config.lpc_model_order + 1
    assert result.lpc_coefficients[0] == 1.0
    assert result.lpc_gain > 0
    assert result.power_frame.start <= result.frame.start <= result.frame.end <= result.power_frame.end
    assert result.vowel_samples.size == len(result.frame)
    for response in (result.resampled_frequency_response, result.windowed_vowel_frequency_response,
                     result.lpc_frequency_response, result.formants_frequency_response):
        assert response.shape == result.frequencies.shape
    assert result.lpc_voiced_samples.size == int(config.voiced_sample_duration * config.resample_rate)
    assert len(result.lpc_polynomial_roots) >= len(result.formants)


def test_voiced_range_excludes_silence(vowel):
    samples, rate = vowel

    result = analyze(samples, rate)

    # тишина по 0.25 с с каждой стороны при частоте 10 кГц
    assert result.power_frame.start >= 2000
    assert result.power_frame.end <= 10500


def test_result_is_immutable(vowel):
    samples, rate = vowel

    result = analyze(samples, rate)

    with pytest.raises(dataclasses.FrozenInstanceError):
        result.lpc_gain = 2.0
    with pytest.raises(ValueError):
        result.lpc_coefficients[0] = 2.0
    assert isinstance(result.formants, tuple)


@pytest.mark.parametrize("samples, rate", [(np.array([]), 16000), (np.ones(100), 0), (np.ones(100), -1)])
def test_degenerate_input_gives_empty_result(samples, rate):
    result = analyze(samples, rate)

    assert result.is_empty
    assert result.formants == ()
    assert result.lpc_gain == 0.0
    assert np.all(result.lpc_frequency_response == -100.0)


def test_silence_gives_no_formants():
    result = analyze(np.zeros(16000), 16000)

    assert result.formants == ()
    assert result.power_frame is None
    assert result.resampled_samples.size == 10000
    assert len(result.chunk_powers) == 40


def test_frame_shorter_than_order_degrades():
    rng = np.random.default_rng(0)

    result = analyze(rng.normal(size=5), 10000)

    expected = np.zeros(13)
    expected[0] = 1.0
    np.testing.assert_array_equal(result.lpc_coefficients, expected)
    assert result.formants == ()


def test_custom_frequency_grid(vowel):
    samples, rate = vowel
    grid = np.linspace(100.0, 4000.0, 50)

    result = FormantAnalyzer(frequencies=grid).analyze(samples, rate)

    np.testing.assert_array_equal(result.frequencies, grid)
    assert result.lpc_frequency_response.shape == (50,)


def test_get_formant_analyzer_uses_defaults():
    analyzer = get_formant_analyzer()

    assert analyzer.config == AnalysisConfig()
    assert analyzer.frequencies.size == AnalysisConfig().frequency_grid.size
