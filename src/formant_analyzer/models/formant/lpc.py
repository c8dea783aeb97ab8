"""
Модуль: lpc.py
Описание: Оценка коэффициентов линейного предсказания (LPC) методом
автокорреляции и рекурсии Левинсона-Дурбина.
"""

import numpy as np

from formant_analyzer.log import setup_logger
from formant_analyzer.models.formant.types import LPCModel

log = setup_logger("lpc")


def autocorrelation(samples: np.ndarray, max_lag: int, normalize: bool = True) -> np.ndarray:
    """
    Вычисляет смещённую автокорреляцию r[0..max_lag].

    Args:
        samples: Фрейм сигнала
        max_lag: Максимальная задержка
        normalize: Нормировать последовательность на r[0]

    Returns:
        Массив r длины max_lag + 1; пустой массив, если фрейм не длиннее max_lag
    """
    samples = np.asarray(samples, dtype=np.float64)
    n = samples.size
    if max_lag < 0 or n <= max_lag:
        return np.array([], dtype=np.float64)

    correlations = np.array([np.dot(samples[:n - lag], samples[lag:]) for lag in range(max_lag + 1)])

    if normalize and correlations[0] > 0:
        correlations = correlations / correlations[0]
    return correlations


def levinson_durbin(r: np.ndarray, order: int, check_error: bool = True) -> tuple[np.ndarray, float]:
    """
    Решает уравнения Юла-Уокера рекурсией Левинсона-Дурбина.

    На шаге i коэффициент отражения
    k = -(r[i] + Σ_{j=1}^{i-1} a[j]·r[i-j]) / E,
    a[j] += k·a[i-j] (по значениям до обновления), a[i] = k, E *= (1 - k²).

    Args:
        r: Автокорреляция r[0..order]
        order: Порядок модели
        check_error: Прерывать рекурсию при вырождении E; без проверки
            вычисление продолжается и может дать inf/nan

    Returns:
        (a, E): коэффициенты a[0..order] с a[0] = 1 и остаточная энергия

    Raises:
        FloatingPointError: если check_error и E стала неположительной или нечисловой
    """
    a = np.zeros(order + 1)
    a[0] = 1.0
    error = float(r[0])

    for i in range(1, order + 1):
        k = -(r[i] + np.dot(a[1:i], r[i - 1:0:-1])) / error
        previous = a[1:i].copy()
        a[1:i] = previous + k * previous[::-1]
        a[i] = k
        error *= 1.0 - k * k
        if check_error and (not np.isfinite(error) or error <= 0):
            raise FloatingPointError(f"Остаточная энергия вырождена на шаге {i}: {error}")

    return a, error


def estimate_lpc(samples: np.ndarray, order: int) -> LPCModel:
    """
    Оценивает всеполюсную модель порядка order для взвешенного фрейма.

    Вырожденные случаи (фрейм не длиннее порядка, тишина, срыв рекурсии)
    дают тождественный фильтр [1, 0, ..., 0] с единичной ошибкой - это
    допустимый результат, а не ошибка.

    Args:
        samples: Взвешенный фрейм
        order: Порядок LPC-модели

    Returns:
        LPC-модель с коэффициентами и усилением sqrt(E)
    """
    samples = np.asarray(samples, dtype=np.float64)
    if order < 1:
        return LPCModel.identity(0)

    if samples.size <= order:
        log.warning('Фрейм из %d отсчётов короче порядка модели %d, используется тождественный фильтр',
                    samples.size, order)
        return LPCModel.identity(order)

    r = autocorrelation(samples, order)
    if r.size <= order or not np.isfinite(r[0]) or r[0] <= 0:
        log.warning('Нулевая энергия фрейма, используется тождественный фильтр')
        return LPCModel.identity(order)

    try:
        coefficients, error = levinson_durbin(r, order)
    except FloatingPointError as exc:
        log.warning('Срыв рекурсии Левинсона-Дурбина: %s', exc)
        return LPCModel.identity(order)

    log.debug('LPC порядка %d: ошибка предсказания %.3e', order, error)
    return LPCModel(coefficients=coefficients, gain=float(np.sqrt(error)))


def estimate_legacy_lpc(samples: np.ndarray, order: int) -> np.ndarray:
    """
    Коэффициенты LPC в устаревшем варианте: ненормированная автокорреляция,
    без окна; при слишком коротком или беззвучном фрейме возвращается
    массив из единиц длины order + 1.

    Остаточная энергия не проверяется: если она обнулилась, рекурсия
    продолжается и коэффициенты становятся inf/nan.
    """
    samples = np.asarray(samples, dtype=np.float64)
    fallback = np.ones(order + 1)
    if samples.size <= order:
        return fallback

    r = autocorrelation(samples, order, normalize=False)
    if r[0] == 0:
        return fallback

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        coefficients, _ = levinson_durbin(r, order, check_error=False)
    if not np.all(np.isfinite(coefficients)):
        log.warning('Вырожденная рекурсия Левинсона-Дурбина (устаревший конвейер): %s',
                    np.array2string(coefficients, precision=6))
    return coefficients
