"""Конфигурация анализа и инфраструктуры через переменные окружения.

Физические константы остаются в constants.py, они не должны
меняться через .env.

Использование::

    from formant_analyzer.config import AnalysisConfig, settings

    config = AnalysisConfig()                 # значения по умолчанию
    config = config.replace(lpc_model_order=10)
    config.frequency_grid                     # сетка частот в Гц
    settings.log_level                        # 'INFO'
"""

from pathlib import Path
from typing import Any, Literal

import numpy as np
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from formant_analyzer import constants as c


def hz_to_mel(hz):
    """Переводит частоту из Гц в мел."""
    return c.MEL_SCALE_FACTOR * np.log10(1.0 + np.asarray(hz, dtype=float) / c.MEL_BREAK_FREQUENCY)


def mel_to_hz(mel):
    """Переводит частоту из мел в Гц."""
    return c.MEL_BREAK_FREQUENCY * (10.0 ** (np.asarray(mel, dtype=float) / c.MEL_SCALE_FACTOR) - 1.0)


def default_frequency_grid() -> np.ndarray:
    """Сетка частот, равномерная по шкале мел (≈20..5100 Гц)."""
    mels = np.arange(c.FREQUENCY_GRID_MEL_START, c.FREQUENCY_GRID_MEL_STOP, c.FREQUENCY_GRID_MEL_STEP)
    return mel_to_hz(mels)


class AnalysisConfig(BaseSettings):
    """Неизменяемые параметры одного формантного анализа.

    Порядок модели не проверяется относительно длины фрейма: если фрейм
    короче порядка, анализ деградирует, а не падает.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_prefix='FA_',
        extra='ignore',
        frozen=True,
    )

    # ── Подготовка сигнала ───────────────────────
    resample_rate: float = Field(c.DEFAULT_RESAMPLE_RATE, gt=0)
    preemphasis_coefficient: float = Field(c.DEFAULT_PREEMPHASIS, ge=0.0, lt=1.0)
    framing_chunk_duration: float = Field(c.DEFAULT_CHUNK_DURATION_S, gt=0)
    framing_power_threshold: float = Field(c.DEFAULT_POWER_THRESHOLD, ge=0.0, le=1.0)
    framing_trim_factor: float = Field(c.DEFAULT_TRIM_FACTOR, ge=0.0, le=0.5)
    cosine_window_alpha: float = Field(c.HAMMING_ALPHA, ge=0.0, le=1.0)

    # ── LPC ──────────────────────────────────────
    lpc_model_order: int = Field(c.DEFAULT_LPC_ORDER, ge=1)
    root_finder: Literal['companion', 'laguerre'] = 'companion'

    # ── Отбор и слияние формант ──────────────────
    min_formant_separation_mel: float = Field(c.DEFAULT_MIN_SEPARATION_MEL, ge=0.0)
    min_formant_frequency: float = Field(c.MIN_FORMANT_FREQUENCY, ge=0.0)
    min_pole_radius: float = Field(c.MIN_POLE_RADIUS, ge=0.0)
    max_pole_radius: float = Field(c.MAX_POLE_RADIUS, gt=0.0)
    min_q: float = Field(c.MIN_FORMANT_Q, ge=0.0)
    max_q: float = Field(c.MAX_FORMANT_Q, gt=0.0)

    # ── Синтез ───────────────────────────────────
    voiced_sample_duration: float = Field(c.DEFAULT_VOICED_DURATION_S, ge=0.0)
    voiced_f0: float = Field(c.DEFAULT_VOICED_F0, gt=0)

    @property
    def frequency_grid(self) -> np.ndarray:
        """Сетка частот для частотных характеристик по умолчанию."""
        return default_frequency_grid()

    def replace(self, **changes: Any) -> 'AnalysisConfig':
        """Возвращает новую проверенную конфигурацию с изменёнными полями."""
        values = self.model_dump()
        values.update(changes)
        return type(self)(**values)


class Settings(BaseSettings):
    """Инфраструктурные настройки formant_analyzer."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_prefix='FA_',
        extra='ignore',
    )

    # ── Пути ─────────────────────────────────────
    # Относительно рабочего каталога, не каталога установки пакета
    logs_dir: Path = Path('logs')

    # ── Логирование ──────────────────────────────
    log_level: str = 'INFO'
    log_to_file: bool = True


settings = Settings()
