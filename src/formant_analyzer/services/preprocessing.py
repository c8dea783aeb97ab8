"""
Модуль: preprocessing.py
Описание: Подготовка сигнала к LPC-анализу: ресемплирование, предыскажение,
энергетическая разметка, поиск вокализованного участка, обрезка краёв и
оконное взвешивание. Также содержит функции разметки устаревшего конвейера.

Все функции возвращают новые массивы и не меняют входные данные.
Пустой или слишком короткий вход даёт пустой/нейтральный результат,
а не исключение.
"""

import math
from typing import List, Optional, Tuple

import librosa
import numpy as np
import scipy.signal

from formant_analyzer.log import setup_logger
from formant_analyzer.models.formant.types import ChunkPower, IndexRange

log = setup_logger("preprocessing")


def resample(samples: np.ndarray, from_rate: float, to_rate: float) -> np.ndarray:
    """
    Ресемплирует сигнал с ограничением полосы (полифазный фильтр soxr).

    Args:
        samples: Исходные отсчёты
        from_rate: Исходная частота дискретизации в Гц
        to_rate: Целевая частота дискретизации в Гц

    Returns:
        Ресемплированный сигнал; пустой массив при пустом входе
        или неположительных частотах
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0 or from_rate <= 0 or to_rate <= 0:
        return np.array([], dtype=np.float64)

    if from_rate == to_rate:
        return samples.copy()

    resampled = librosa.resample(samples, orig_sr=float(from_rate), target_sr=float(to_rate), res_type="soxr_hq")
    log.debug("Ресемплирование %s Гц -> %s Гц: %d -> %d отсчётов", from_rate, to_rate, samples.size, resampled.size)
    return np.asarray(resampled, dtype=np.float64)


def preemphasize(samples: np.ndarray, coefficient: float) -> np.ndarray:
    """
    Применяет КИХ-фильтр предыскажения y[n] = x[n] - c·x[n-1].

    Args:
        samples: Входной сигнал
        coefficient: Коэффициент предыскажения (0 - тождественное преобразование)

    Returns:
        Отфильтрованный сигнал той же длины
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return np.array([], dtype=np.float64)
    if coefficient == 0:
        return samples.copy()
    return scipy.signal.lfilter([1.0, -coefficient], [1.0], samples)


def frame_energy(samples: np.ndarray, sample_rate: float, chunk_duration: float) -> List[ChunkPower]:
    """
    Делит сигнал на фреймы фиксированной длины и вычисляет RMS-мощность каждого.
    Последний неполный фрейм тоже учитывается.

    Args:
        samples: Входной сигнал
        sample_rate: Частота дискретизации в Гц
        chunk_duration: Длительность фрейма в секундах

    Returns:
        Список мощностей фреймов с их диапазонами индексов
    """
    samples = np.asarray(samples, dtype=np.float64)
    samples_per_chunk = int(chunk_duration * sample_rate) if sample_rate > 0 and chunk_duration > 0 else 0
    if samples.size == 0 or samples_per_chunk <= 0:
        return []

    chunk_powers = []
    for start in range(0, samples.size, samples_per_chunk):
        end = min(start + samples_per_chunk, samples.size) - 1
        chunk = samples[start:end + 1]
        rms_power = float(np.sqrt(np.mean(chunk ** 2)))
        chunk_powers.append(ChunkPower(indices=IndexRange(start, end), rms_power=rms_power))

    return chunk_powers


def find_voiced_range(chunk_powers: List[ChunkPower], power_threshold: float) -> Optional[IndexRange]:
    """
    Находит участок от первого до последнего фрейма, мощность которого
    не ниже power_threshold × максимальной мощности фрейма.

    Args:
        chunk_powers: Мощности фреймов
        power_threshold: Порог как доля максимальной мощности (0-1)

    Returns:
        Диапазон отсчётов или None, если сигнал пуст или полностью беззвучен
    """
    if not chunk_powers:
        return None

    powers = np.array([chunk.rms_power for chunk in chunk_powers])
    max_power = float(np.max(powers))
    if not max_power > 0:
        return None

    selected = np.flatnonzero(powers >= max_power * power_threshold)
    if selected.size == 0:
        return None

    first_chunk = chunk_powers[int(selected[0])]
    last_chunk = chunk_powers[int(selected[-1])]
    return IndexRange(first_chunk.indices.start, last_chunk.indices.end)


def trim_range(index_range: IndexRange, trim_factor: float) -> IndexRange:
    """
    Симметрично сужает диапазон на trim_factor его длины с каждой стороны,
    чтобы отбросить переходные согласные в начале и конце гласной.
    При trim_factor >= 0.5 диапазон вырождается в одну точку.

    Args:
        index_range: Исходный диапазон
        trim_factor: Доля длины, отрезаемая с каждой стороны (0-0.5)

    Returns:
        Суженный диапазон
    """
    trim_amount = int(len(index_range) * trim_factor)
    start = index_range.start + trim_amount
    end = index_range.end - trim_amount
    if start <= end:
        return IndexRange(start, end)
    return IndexRange(start, start)


def cosine_window(length: int, alpha: float) -> np.ndarray:
    """
    Окно приподнятого косинуса w[n] = alpha - (1 - alpha)·cos(2πn/(N-1)).
    alpha = 25/46 - Хэмминг, 0.5 - Ханн, 1.0 - прямоугольное.
    """
    if length <= 0:
        return np.array([], dtype=np.float64)
    return scipy.signal.windows.general_hamming(length, alpha, sym=True)


def apply_window(samples: np.ndarray, alpha: float) -> np.ndarray:
    """
    Умножает сигнал на окно приподнятого косинуса.

    Args:
        samples: Входной фрейм
        alpha: Параметр окна

    Returns:
        Взвешенный фрейм
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return np.array([], dtype=np.float64)
    return samples * cosine_window(samples.size, alpha)


# ──────────────── Устаревший конвейер ────────────────

def decimation_factor(sample_rate: int, target_rate: int = 10_000) -> int:
    """Форманты человека ниже 5 кГц, поэтому информация выше 10 кГц не нужна."""
    return max(1, int(sample_rate) // target_rate)


def decimate(samples: np.ndarray, step: int) -> np.ndarray:
    """Оставляет первый из каждых step отсчётов (без фильтрации)."""
    if step <= 0:
        return np.array([], dtype=np.asarray(samples).dtype)
    return np.asarray(samples)[::step].copy()


def find_strong_part(samples: np.ndarray, chunks: int, sensitivity: float) -> Tuple[int, int]:
    """
    Находит участок сигнала с сильной энергией (устаревший алгоритм).

    Сигнал делится на chunks полных фреймов; энергия фрейма - сумма квадратов.
    Берутся первый и последний фреймы с энергией строго выше
    max_energy × sensitivity.

    Args:
        samples: Входной сигнал
        chunks: Количество фреймов
        sensitivity: Порог как доля максимальной энергии

    Returns:
        Полуоткрытый диапазон (start, stop); (0, 0) для пустого сигнала
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0 or chunks <= 0:
        return 0, 0

    chunk_size = max(1, samples.size // chunks)
    full_chunks = (samples.size - chunk_size) // chunk_size + 1
    energies = np.sum(samples[:full_chunks * chunk_size].reshape(full_chunks, chunk_size) ** 2, axis=1)
    threshold = np.max(energies) * sensitivity

    strong = np.flatnonzero(energies > threshold)
    first_chunk = int(strong[0]) if strong.size else 0
    last_chunk = int(strong[-1]) if strong.size else full_chunks - 1
    return first_chunk * chunk_size, min((last_chunk + 1) * chunk_size, samples.size)


def truncate_tails(start: int, stop: int, portion: float) -> Tuple[int, int]:
    """
    Сужает полуоткрытый диапазон на portion его длины с каждой стороны.
    Округление - половина вверх.
    """
    count = stop - start
    return start + int(math.floor(portion * count + 0.5)), start + int(math.floor((1 - portion) * count + 0.5))


def downsample_peaks(samples: np.ndarray, sample_count: int) -> np.ndarray:
    """
    Понижает разрешение сигнала для графика: максимум в каждом фрагменте.

    Args:
        samples: Входной сигнал
        sample_count: Желаемое число точек

    Returns:
        Максимумы фрагментов
    """
    samples = np.asarray(samples)
    if sample_count <= 0:
        return samples[:0].copy()
    if sample_count >= samples.size:
        return samples.copy()

    chunk_size = samples.size // sample_count
    full_chunks = (samples.size - chunk_size) // chunk_size + 1
    return samples[:full_chunks * chunk_size].reshape(full_chunks, chunk_size).max(axis=1)
