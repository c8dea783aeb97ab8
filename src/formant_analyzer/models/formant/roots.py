"""
Модуль: roots.py
Описание: Поиск комплексных корней полинома A(z) = a[0] + a[1]·z + ... + a[n]·z^n.

Два взаимозаменяемых метода:
1. Метод Лагерра с понижением степени (deflation) и последующим
   уточнением каждого корня по исходному полиному.
2. Собственные значения сопровождающей матрицы (companion matrix)
   с проверкой каждого корня подстановкой в исходный полином.

Оба метода возвращают корни, отсортированные по углу (т.е. по частоте
полюса), а при равных углах - по модулю.
"""

import cmath
import math
from typing import Literal

import numpy as np
import scipy.linalg

from formant_analyzer import constants as c
from formant_analyzer.exceptions import (
    InvalidInput,
    NumericalBackendError,
    NumericalInstability,
    UnsupportedPrecision,
)
from formant_analyzer.log import setup_logger

log = setup_logger("roots")

RootFinderMethod = Literal["companion", "laguerre"]


def _coefficient_tolerance(max_coefficient: float) -> float:
    return max(c.COEFFICIENT_TOLERANCE, max_coefficient * c.COEFFICIENT_RELATIVE_TOLERANCE)


def prepare_coefficients(coefficients) -> np.ndarray:
    """
    Проверяет коэффициенты и отбрасывает старшие почти нулевые.

    Вычисления ведутся только в двойной точности: вещественные
    коэффициенты приводятся к float64, комплексные - к complex128.

    Args:
        coefficients: Коэффициенты [a0, a1, ..., an] по возрастанию степени

    Returns:
        Массив коэффициентов степени >= 1 с ненулевым старшим коэффициентом

    Raises:
        InvalidInput: пустой массив, степень < 1, нулевой полином, нечисловые значения
        UnsupportedPrecision: тип данных не целый/вещественный/комплексный двойной точности
    """
    array = np.asarray(coefficients)
    if array.size == 0:
        raise InvalidInput("Empty coefficient array")

    if array.dtype.kind in "iub":
        array = array.astype(np.float64)
    elif array.dtype.kind == "f" and array.dtype.itemsize <= 8:
        array = array.astype(np.float64)
    elif array.dtype.kind == "c" and array.dtype.itemsize <= 16:
        array = array.astype(np.complex128)
    else:
        raise UnsupportedPrecision(f"Only single and double precision are supported, got {array.dtype}")

    array = array.ravel()
    if array.size < 2:
        raise InvalidInput("Polynomial must have degree >= 1 for root finding")
    if not np.all(np.isfinite(array)):
        raise InvalidInput("Coefficients must be finite")

    max_coefficient = float(np.max(np.abs(array)))
    if max_coefficient == 0:
        raise InvalidInput("All coefficients are zero")

    tolerance = _coefficient_tolerance(max_coefficient)
    degree = array.size - 1
    while degree > 0 and abs(array[degree]) <= tolerance:
        degree -= 1

    if degree == 0:
        raise InvalidInput("Constant polynomial has no roots")
    return array[:degree + 1].copy()


def evaluate_polynomial(coefficients: np.ndarray, point: complex) -> complex:
    """Значение полинома (коэффициенты по возрастанию степени) по схеме Горнера."""
    result = complex(coefficients[-1])
    for coefficient in coefficients[-2::-1]:
        result = result * point + coefficient
    return result


def sort_roots(roots) -> np.ndarray:
    """Сортирует корни по углу, затем по модулю."""
    roots = np.asarray(roots, dtype=np.complex128)
    if roots.size == 0:
        return roots
    order = np.lexsort((np.abs(roots), np.angle(roots)))
    return roots[order]


# ──────────────── Метод Лагерра ────────────────

def laguerre_root(polynomial: np.ndarray, guess: complex = 0j) -> tuple[complex, bool]:
    """
    Находит один корень полинома методом Лагерра.

    На каждом шаге значение полинома и двух производных вычисляются
    синтетическим делением; из двух поправок Лагерра берётся та, у которой
    знаменатель больше по модулю. Каждый 10-й шаг делается дробный шаг,
    чтобы выйти из предельного цикла.

    Args:
        polynomial: Коэффициенты по возрастанию степени
        guess: Начальное приближение

    Returns:
        (root, converged): последнее приближение и признак сходимости
    """
    m = len(polynomial) - 1
    x = complex(guess)

    for iteration in range(1, c.LAGUERRE_MAX_ITERATIONS + 1):
        b = complex(polynomial[m])
        err = abs(b)
        d = 0j
        f = 0j
        abx = abs(x)

        for j in range(m - 1, -1, -1):
            f = x * f + d
            d = x * d + b
            b = x * b + polynomial[j]
            err = abs(b) + abx * err
        err *= c.LAGUERRE_EPSILON

        # Значение полинома в пределах ошибки округления
        if abs(b) <= err:
            return x, True

        g = d / b
        g2 = g * g
        h = g2 - 2.0 * f / b
        sq = cmath.sqrt((m - 1) * (m * h - g2))
        gp = g + sq
        gm = g - sq
        abp = abs(gp)
        abm = abs(gm)
        if abp < abm:
            gp = gm

        if max(abp, abm) > 0:
            dx = m / gp
        else:
            dx = (1 + abx) * complex(math.cos(iteration), math.sin(iteration))

        x1 = x - dx
        if x == x1:
            return x, True

        if iteration % c.LAGUERRE_STEPS_PER_CYCLE:
            x = x1
        else:
            x = x - c.LAGUERRE_BREAKOUT_FRACTIONS[iteration // c.LAGUERRE_STEPS_PER_CYCLE] * dx

    log.warning('Метод Лагерра не сошёлся за %d итераций, возвращается последнее приближение %s',
                c.LAGUERRE_MAX_ITERATIONS, x)
    return x, False


def find_roots_laguerre(coefficients) -> np.ndarray:
    """
    Находит все корни методом Лагерра с понижением степени и уточнением.

    Корни ищутся по одному в текущем (пониженном) полиноме, затем каждый
    уточняется по исходному полиному с найденным корнем в качестве
    начального приближения.

    Args:
        coefficients: Коэффициенты по возрастанию степени

    Returns:
        Отсортированные корни
    """
    polynomial = prepare_coefficients(coefficients).astype(np.complex128)
    degree = len(polynomial) - 1

    deflated = polynomial.copy()
    roots = []
    for j in range(degree, 0, -1):
        root, _ = laguerre_root(deflated[:j + 1])
        if abs(root.imag) < c.IMAGINARY_SNAP_RATIO * abs(root.real):
            root = complex(root.real, 0.0)
        roots.append(root)

        # Синтетическое деление на (z - root)
        b = deflated[j]
        for jj in range(j - 1, -1, -1):
            coefficient = deflated[jj]
            deflated[jj] = b
            b = root * b + coefficient

    polished = [laguerre_root(polynomial, root)[0] for root in roots]
    return sort_roots(polished)


# ──────────────── Сопровождающая матрица ────────────────

def companion_matrix(normalized: np.ndarray) -> np.ndarray:
    """
    Сопровождающая матрица нормированного полинома: единицы на
    поддиагонали, последний столбец - коэффициенты с обратным знаком.
    """
    n = len(normalized)
    matrix = np.zeros((n, n), dtype=normalized.dtype)
    if n > 1:
        matrix[np.arange(1, n), np.arange(n - 1)] = 1.0
    matrix[:, -1] = -normalized
    return matrix


def _validate_roots(roots: np.ndarray, coefficients: np.ndarray) -> np.ndarray:
    """Отбрасывает корни с большой невязкой в исходном полиноме."""
    validated = []
    for root in roots:
        residual = abs(evaluate_polynomial(coefficients, root))
        if residual > c.ROOT_VALIDATION_TOLERANCE:
            log.warning('Корень %s имеет большую невязку: %.3e', root, residual)
        if residual <= c.ROOT_REJECTION_FACTOR * c.ROOT_VALIDATION_TOLERANCE:
            validated.append(root)
    return np.asarray(validated, dtype=np.complex128)


def find_roots_companion(coefficients) -> np.ndarray:
    """
    Находит все корни как собственные значения сопровождающей матрицы.

    Args:
        coefficients: Коэффициенты по возрастанию степени

    Returns:
        Отсортированные корни, прошедшие проверку подстановкой

    Raises:
        NumericalBackendError: если решатель собственных значений завершился с ошибкой
        NumericalInstability: если нормировка на старший коэффициент дала нечисловые значения
    """
    trimmed = prepare_coefficients(coefficients)
    with np.errstate(over='ignore', invalid='ignore'):
        normalized = trimmed[:-1] / trimmed[-1]
    if not np.all(np.isfinite(normalized)):
        raise NumericalInstability("Normalized coefficients are not finite")

    try:
        eigenvalues = scipy.linalg.eigvals(companion_matrix(normalized))
    except (np.linalg.LinAlgError, ValueError) as exc:
        raise NumericalBackendError(f"Eigenvalue computation failed: {exc}") from exc

    if not np.all(np.isfinite(eigenvalues)):
        raise NumericalBackendError("Eigenvalue solver returned non-finite values")

    return sort_roots(_validate_roots(eigenvalues, trimmed))


def find_roots(coefficients, method: RootFinderMethod = "companion") -> np.ndarray:
    """
    Находит корни полинома выбранным методом.

    Args:
        coefficients: Коэффициенты [a0, a1, ..., an] по возрастанию степени
        method: 'companion' или 'laguerre'

    Returns:
        Корни, отсортированные по углу и модулю
    """
    if method == "companion":
        return find_roots_companion(coefficients)
    if method == "laguerre":
        return find_roots_laguerre(coefficients)
    raise ValueError(f"Неизвестный метод поиска корней: {method}")
