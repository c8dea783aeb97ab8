"""
Модуль: audio_io.py
Описание: Загрузка записей (WAV и «сырой» 16-битный PCM) и таблицы
эталонных формант Hillenbrand et al. (1995).
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import soundfile as sf

from formant_analyzer import constants as c
from formant_analyzer.log import setup_logger

log = setup_logger("audio_io")

PathLike = Union[str, Path]

# Строка данных: имя файла (m01ae и т.п.) и 15 числовых столбцов
_HILLENBRAND_LINE = re.compile(r"(?P<filename>[mwbg]\d\d\w\w)(?P<columns>(?:\W+\d+){15})")


@dataclass(frozen=True)
class VowelData:
    """Измерения одной гласной из таблицы Hillenbrand."""

    filename: str
    duration: float                # секунды
    f0: Optional[float]
    f1: Optional[float]
    f2: Optional[float]
    f3: Optional[float]
    f4: Optional[float]


def pcm16_to_float(samples: np.ndarray) -> np.ndarray:
    """Переводит отсчёты int16 в float64 в диапазоне [-1, 1)."""
    return np.asarray(samples, dtype=np.float64) / c.PCM16_SCALE


def load_raw_pcm16(path: PathLike, sample_rate: int) -> np.ndarray:
    """
    Читает файл без заголовка: моно, 16 бит, little-endian.

    Args:
        path: Путь к файлу .raw
        sample_rate: Частота дискретизации записи в Гц

    Returns:
        Отсчёты float64, нормированные на 32768

    Raises:
        RuntimeError: если файл не удалось прочитать
    """
    try:
        samples, _ = sf.read(str(path), samplerate=int(sample_rate), channels=1, format='RAW',
                             subtype='PCM_16', endian='LITTLE', dtype='int16')
    except (sf.LibsndfileError, OSError) as exc:
        raise RuntimeError(f"Не удалось прочитать PCM-файл {path}: {exc}") from exc

    log.debug('Прочитано %d отсчётов из %s', samples.size, path)
    return pcm16_to_float(samples)


def load_wav(path: PathLike) -> Tuple[np.ndarray, int]:
    """
    Читает WAV-файл и сводит его в моно.

    Args:
        path: Путь к файлу

    Returns:
        (samples, sample_rate)

    Raises:
        RuntimeError: если файл не удалось прочитать
    """
    try:
        samples, sample_rate = sf.read(str(path), dtype='float64', always_2d=True)
    except (sf.LibsndfileError, OSError) as exc:
        raise RuntimeError(f"Не удалось прочитать аудиофайл {path}: {exc}") from exc

    if samples.shape[1] > 1:
        log.debug('Файл %s: %d каналов сведены в моно', path, samples.shape[1])
    return samples.mean(axis=1), int(sample_rate)


def _measurement(value: float) -> Optional[float]:
    return value if value > 0 else None


def load_hillenbrand_vowels(path: PathLike) -> List[VowelData]:
    """
    Разбирает таблицу vowdata.dat.

    Строки, не начинающиеся с имени файла, пропускаются. Длительность
    переводится из миллисекунд в секунды, нулевые измерения становятся None.

    Args:
        path: Путь к vowdata.dat

    Returns:
        Записи в порядке следования в файле
    """
    vowels = []
    with open(path, encoding='utf-8', errors='replace') as f:
        for line in f:
            match = _HILLENBRAND_LINE.match(line)
            if not match:
                continue
            columns = [float(value) for value in re.findall(r"\d+", match.group('columns'))]
            vowels.append(VowelData(
                filename=match.group('filename') + '.wav',
                duration=columns[0] / 1000.0,
                f0=_measurement(columns[1]),
                f1=_measurement(columns[2]),
                f2=_measurement(columns[3]),
                f3=_measurement(columns[4]),
                f4=_measurement(columns[5]),
            ))

    log.debug('Загружено %d записей Hillenbrand из %s', len(vowels), path)
    return vowels
