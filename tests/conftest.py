import os

os.environ.setdefault("FA_LOG_TO_FILE", "false")

from pathlib import Path

import numpy as np
import pytest
import scipy.signal

FIXTURES_DIR = Path(__file__).parent / "fixtures"

VOWEL_FORMANTS = (500.0, 1500.0, 2500.0)
VOWEL_BANDWIDTHS = (60.0, 80.0, 100.0)


def all_pole_denominator(formants, bandwidths, sample_rate):
    """Коэффициенты A(z) = Π (1 - 2r·cos(ω)z⁻¹ + r²z⁻²) для заданных резонансов."""
    denominator = np.array([1.0])
    for frequency, bandwidth in zip(formants, bandwidths):
        radius = np.exp(-np.pi * bandwidth / sample_rate)
        omega = 2 * np.pi * frequency / sample_rate
        section = np.array([1.0, -2.0 * radius * np.cos(omega), radius ** 2])
        denominator = np.convolve(denominator, section)
    return denominator


def make_vowel(sample_rate=16000, duration=0.8, silence=0.25, formants=VOWEL_FORMANTS,
               bandwidths=VOWEL_BANDWIDTHS, seed=7):
    """Шёпотная гласная: белый шум через всеполюсный фильтр, окружённый тишиной."""
    rng = np.random.default_rng(seed)
    excitation = rng.normal(0.0, 1.0, int(duration * sample_rate))
    vowel = scipy.signal.lfilter([1.0], all_pole_denominator(formants, bandwidths, sample_rate), excitation)
    vowel *= 0.5 / np.max(np.abs(vowel))

    pad = np.zeros(int(silence * sample_rate))
    return np.concatenate([pad, vowel, pad])


@pytest.fixture
def vowel():
    return make_vowel(), 16000


@pytest.fixture
def arm_samples():
    path = FIXTURES_DIR / "arm.raw"
    if not path.exists():
        pytest.skip("arm.raw fixture is not available")
    return np.fromfile(path, dtype="<i2")
