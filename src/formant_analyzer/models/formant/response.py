"""
Модуль: response.py
Описание: Частотные характеристики LPC-модели и набора резонансов,
спектр отсчётов на произвольной сетке частот и синтез вокализованного
сигнала через резонансные фильтры (для прослушивания результата).
"""

from typing import Sequence

import numpy as np
import scipy.signal

from formant_analyzer import constants as c
from formant_analyzer.models.formant.types import Resonance


def _floor_response(frequencies) -> np.ndarray:
    return np.full(len(frequencies), c.SILENT_DB_LEVEL)


def sample_spectrum(samples: np.ndarray, sample_rate: float, frequencies: Sequence[float]) -> np.ndarray:
    """
    Спектр сигнала на заданных частотах: 20·log10(|X(f)| / N).

    Args:
        samples: Сигнал
        sample_rate: Частота дискретизации в Гц
        frequencies: Частоты в Гц

    Returns:
        Уровни в дБ; уровень тишины для пустого сигнала и малых амплитуд
    """
    samples = np.asarray(samples, dtype=np.float64)
    frequencies = np.asarray(frequencies, dtype=np.float64)
    if samples.size == 0 or sample_rate <= 0:
        return _floor_response(frequencies)

    n = np.arange(samples.size)
    response = np.empty(frequencies.size)
    for i, frequency in enumerate(frequencies):
        omega = c.TWO_PI * frequency / sample_rate
        magnitude = abs(np.dot(samples, np.exp(-1j * omega * n))) / samples.size
        response[i] = 20.0 * np.log10(magnitude) if magnitude > c.SPECTRUM_MAGNITUDE_FLOOR else c.SILENT_DB_LEVEL
    return response


def lpc_frequency_response(coefficients: np.ndarray, gain: float, sample_rate: float,
                           frequencies: Sequence[float]) -> np.ndarray:
    """
    Частотная характеристика всеполюсной модели H = G / A(e^{jω}).

    Args:
        coefficients: Коэффициенты a[0..p]
        gain: Усиление модели
        sample_rate: Частота дискретизации в Гц
        frequencies: Частоты в Гц

    Returns:
        20·log10(G) - 20·log10(|A|) в дБ; уровень тишины, если |A| исчезающе мал
    """
    coefficients = np.asarray(coefficients, dtype=np.float64)
    frequencies = np.asarray(frequencies, dtype=np.float64)
    if coefficients.size == 0 or sample_rate <= 0 or not np.isfinite(gain) or gain <= 0:
        return _floor_response(frequencies)

    gain_db = 20.0 * np.log10(gain)
    omegas = c.TWO_PI * frequencies / sample_rate
    powers = np.arange(coefficients.size)
    denominators = np.abs(np.exp(-1j * np.outer(omegas, powers)) @ coefficients)

    response = np.full(frequencies.size, c.SILENT_DB_LEVEL)
    valid = denominators > c.LPC_MAGNITUDE_FLOOR
    response[valid] = gain_db - 20.0 * np.log10(denominators[valid])
    return response


def resonance_frequency_response(resonances: Sequence[Resonance], sample_rate: float,
                                 frequencies: Sequence[float]) -> np.ndarray:
    """
    Частотная характеристика параллельного банка резонаторов.

    Каждый резонанс моделируется парой сопряжённых полюсов
    p = r·e^{jω0}, r = exp(-π·bandwidth/fs); отклики суммируются.

    Args:
        resonances: Резонансы
        sample_rate: Частота дискретизации в Гц
        frequencies: Частоты в Гц

    Returns:
        Уровни в дБ со смещением -40 дБ для отображения
    """
    frequencies = np.asarray(frequencies, dtype=np.float64)
    if not resonances or sample_rate <= 0:
        return _floor_response(frequencies)

    z_inv = np.exp(-1j * c.TWO_PI * frequencies / sample_rate)
    total = np.zeros(frequencies.size, dtype=np.complex128)
    for resonance in resonances:
        radius = np.exp(-np.pi * resonance.bandwidth / sample_rate)
        pole = radius * np.exp(1j * c.TWO_PI * resonance.frequency / sample_rate)
        denominator = (1.0 - pole * z_inv) * (1.0 - np.conj(pole) * z_inv)
        valid = np.abs(denominator) > c.RESONATOR_DENOMINATOR_FLOOR
        total[valid] += 1.0 / denominator[valid]

    magnitude = np.abs(total)
    response = np.full(frequencies.size, c.SILENT_DB_LEVEL)
    valid = magnitude > c.LPC_MAGNITUDE_FLOOR
    response[valid] = 20.0 * np.log10(magnitude[valid]) + c.RESONANCE_RESPONSE_OFFSET_DB
    return response


def resonator_sections(resonances: Sequence[Resonance], sample_rate: float) -> np.ndarray:
    """
    Секции второго порядка (формат scipy sos) для каскада резонаторов:
    b0 = 1 - r², a1 = -2r·cos(ω0), a2 = r².
    Резонансы вне (0, fs/2) или с неположительной добротностью пропускаются.
    """
    sections = []
    for resonance in resonances:
        if not (0 < resonance.frequency < sample_rate / 2) or resonance.q <= 0:
            continue
        radius = np.exp(-np.pi * resonance.bandwidth / sample_rate)
        omega = c.TWO_PI * resonance.frequency / sample_rate
        sections.append([1.0 - radius ** 2, 0.0, 0.0, 1.0, -2.0 * radius * np.cos(omega), radius ** 2])
    return np.array(sections, dtype=np.float64).reshape(-1, 6)


def synthesize_voiced(resonances: Sequence[Resonance], sample_rate: float, duration: float,
                      f0: float) -> np.ndarray:
    """
    Синтезирует вокализованный звук: импульсная последовательность с частотой
    f0 проходит через каскад резонаторов, затем сигнал нормируется по пику до 0.9.
    Используется только для прослушивания результата.

    Args:
        resonances: Резонансы
        sample_rate: Частота дискретизации в Гц
        duration: Длительность в секундах
        f0: Частота основного тона в Гц

    Returns:
        Синтезированный сигнал; пустой массив при вырожденных параметрах
    """
    if sample_rate <= 0 or duration < 0 or f0 <= 0:
        return np.array([], dtype=np.float64)

    n_samples = int(duration * sample_rate)
    samples_per_period = int(sample_rate / f0)
    if n_samples <= 0 or samples_per_period <= 0:
        return np.array([], dtype=np.float64)

    signal = np.zeros(n_samples)
    signal[::samples_per_period] = 1.0

    sections = resonator_sections(resonances, sample_rate)
    if len(sections):
        signal = scipy.signal.sosfilt(sections, signal)

    peak = np.max(np.abs(signal))
    if peak > c.VOICED_SILENCE_FLOOR:
        signal = signal * (c.VOICED_PEAK_AMPLITUDE / peak)
    return signal


def legacy_lpc_response(coefficients: np.ndarray, sample_rate: float, frequencies: Sequence[float]) -> np.ndarray:
    """Устаревшая характеристика 20·log10(1 / |Σ a_k·e^{jkω}|), без усиления."""
    coefficients = np.asarray(coefficients, dtype=np.float64)
    frequencies = np.asarray(frequencies, dtype=np.float64)
    if coefficients.size == 0 or sample_rate <= 0:
        return _floor_response(frequencies)

    omegas = c.TWO_PI * frequencies / sample_rate
    sums = np.abs(np.exp(1j * np.outer(omegas, np.arange(coefficients.size))) @ coefficients)
    response = np.full(frequencies.size, c.SILENT_DB_LEVEL)
    valid = sums > c.LPC_MAGNITUDE_FLOOR
    response[valid] = -20.0 * np.log10(sums[valid])
    return response
