"""
Модуль: types.py
Описание: Типы данных формантного анализа: диапазоны отсчётов, мощности
фреймов, LPC-модель, резонансы и итоговый результат анализа.
Все значения неизменяемы: каждый этап конвейера создаёт новые объекты.
"""

from dataclasses import dataclass, fields
from typing import Optional

import numpy as np

from formant_analyzer.config import AnalysisConfig
from formant_analyzer.constants import SILENT_DB_LEVEL


def readonly(values, dtype=float) -> np.ndarray:
    """Возвращает копию массива, защищённую от записи."""
    array = np.array(values, dtype=dtype)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class IndexRange:
    """Замкнутый диапазон индексов отсчётов [start, end]."""

    start: int
    end: int

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)

    def as_slice(self) -> slice:
        return slice(self.start, self.end + 1)


@dataclass(frozen=True)
class ChunkPower:
    """RMS-мощность одного фрейма энергетической разметки."""

    indices: IndexRange
    rms_power: float


@dataclass(frozen=True)
class LPCModel:
    """
    Всеполюсная модель голосового тракта.

    Коэффициенты a[0..p] с a[0] = 1 (ошибка = x[n] + Σ a[k]·x[n-k]),
    усиление = sqrt(остаточной энергии предсказания).
    """

    coefficients: np.ndarray
    gain: float

    def __post_init__(self):
        object.__setattr__(self, "coefficients", readonly(self.coefficients))

    @property
    def order(self) -> int:
        return len(self.coefficients) - 1

    @property
    def prediction_error(self) -> float:
        return self.gain ** 2

    @classmethod
    def identity(cls, order: int) -> "LPCModel":
        """Тождественный фильтр [1, 0, ..., 0] с единичной ошибкой."""
        coefficients = np.zeros(max(order, 0) + 1)
        coefficients[0] = 1.0
        return cls(coefficients=coefficients, gain=1.0)


@dataclass(frozen=True)
class Resonance:
    """Резонанс (форманта): центральная частота и добротность."""

    frequency: float
    q: float

    @property
    def bandwidth(self) -> float:
        """Ширина полосы в Гц (FWHM)."""
        return self.frequency / self.q

    def __str__(self) -> str:
        return f"{self.frequency:.2f} Hz / {self.q:.2f} Q"


_ARRAY_FIELDS = (
    "original_samples",
    "resampled_samples",
    "vowel_samples",
    "frequencies",
    "resampled_frequency_response",
    "windowed_vowel_frequency_response",
    "lpc_coefficients",
    "lpc_frequency_response",
    "formants_frequency_response",
    "lpc_voiced_samples",
    "formants_voiced_samples",
)


@dataclass(frozen=True)
class AnalysisResult:
    """
    Итог одного анализа: финальные форманты и все промежуточные артефакты,
    нужные для диагностики и визуализации. Создаётся один раз и не меняется.
    """

    # Входные данные
    original_samples: np.ndarray
    original_sample_rate: float
    configuration: AnalysisConfig

    # Подготовка сигнала
    resampled_samples: np.ndarray
    chunk_powers: tuple[ChunkPower, ...]
    power_frame: Optional[IndexRange]
    frame: Optional[IndexRange]
    vowel_samples: np.ndarray

    # Частотные характеристики (дБ) на общей сетке частот
    frequencies: np.ndarray
    resampled_frequency_response: np.ndarray
    windowed_vowel_frequency_response: np.ndarray

    # LPC-модель
    lpc_coefficients: np.ndarray
    lpc_gain: float
    lpc_polynomial_roots: tuple[Resonance, ...]
    lpc_frequency_response: np.ndarray
    lpc_voiced_samples: np.ndarray

    # Форманты после слияния
    formants: tuple[Resonance, ...]
    formants_frequency_response: np.ndarray
    formants_voiced_samples: np.ndarray

    def __post_init__(self):
        for name in _ARRAY_FIELDS:
            object.__setattr__(self, name, readonly(getattr(self, name)))
        object.__setattr__(self, "chunk_powers", tuple(self.chunk_powers))
        object.__setattr__(self, "lpc_polynomial_roots", tuple(self.lpc_polynomial_roots))
        object.__setattr__(self, "formants", tuple(self.formants))

    @property
    def formant_frequencies(self) -> list[float]:
        return [formant.frequency for formant in self.formants]

    @property
    def is_empty(self) -> bool:
        return len(self.formants) == 0 and len(self.lpc_coefficients) == 0

    @classmethod
    def empty(cls, configuration, frequencies, original_samples=(),
              original_sample_rate: float = 0.0) -> "AnalysisResult":
        """Нейтральный результат: пустые массивы и уровень тишины в характеристиках."""
        floor = np.full(len(frequencies), SILENT_DB_LEVEL)
        return cls(
            original_samples=original_samples,
            original_sample_rate=original_sample_rate,
            configuration=configuration,
            resampled_samples=(),
            chunk_powers=(),
            power_frame=None,
            frame=None,
            vowel_samples=(),
            frequencies=frequencies,
            resampled_frequency_response=floor,
            windowed_vowel_frequency_response=floor,
            lpc_coefficients=(),
            lpc_gain=0.0,
            lpc_polynomial_roots=(),
            lpc_frequency_response=floor,
            lpc_voiced_samples=(),
            formants=(),
            formants_frequency_response=floor,
            formants_voiced_samples=(),
        )

    def summary(self) -> dict[str, object]:
        """Краткое описание результата для журналирования."""
        return {
            field.name: len(getattr(self, field.name))
            for field in fields(self)
            if field.name in _ARRAY_FIELDS
        } | {"formants": [str(f) for f in self.formants], "lpc_gain": self.lpc_gain}
