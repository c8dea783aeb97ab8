"""
Модуль: constraints.py
Описание: Отбор физически допустимых полюсов LPC-модели, перевод полюсов
в резонансы (частота/добротность) и слияние перцептивно неразличимых формант.
"""

import math
from typing import List, Optional, Sequence

import numpy as np

from formant_analyzer import constants as c
from formant_analyzer.config import AnalysisConfig, hz_to_mel
from formant_analyzer.exceptions import PolynomialError
from formant_analyzer.log import setup_logger
from formant_analyzer.models.formant.roots import RootFinderMethod, find_roots
from formant_analyzer.models.formant.types import Resonance

log = setup_logger("formant_constraints")


class FormantConstraintHandler:
    """
    Проверяет полюса LPC-полинома на соответствие резонансам речи.

    Полюс считается формантой, если его модуль лежит в полосе
    (min_pole_radius, max_pole_radius), угол положителен, частота выше
    min_formant_frequency, ширина полосы положительна, а добротность
    в пределах (min_q, max_q). Остальные полюса - численные артефакты.
    """

    def __init__(self, min_pole_radius: float = c.MIN_POLE_RADIUS,
                 max_pole_radius: float = c.MAX_POLE_RADIUS,
                 min_formant_frequency: float = c.MIN_FORMANT_FREQUENCY,
                 min_q: float = c.MIN_FORMANT_Q,
                 max_q: float = c.MAX_FORMANT_Q):
        self.min_pole_radius = min_pole_radius
        self.max_pole_radius = max_pole_radius
        self.min_formant_frequency = min_formant_frequency
        self.min_q = min_q
        self.max_q = max_q

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "FormantConstraintHandler":
        return cls(
            min_pole_radius=config.min_pole_radius,
            max_pole_radius=config.max_pole_radius,
            min_formant_frequency=config.min_formant_frequency,
            min_q=config.min_q,
            max_q=config.max_q,
        )

    def pole_to_resonance(self, root: complex, sample_rate: float) -> Optional[Resonance]:
        """
        Переводит полюс в резонанс.

        frequency = угол·fs/(2π), bandwidth = -2·ln(модуль)·fs/(2π), q = frequency/bandwidth.

        Args:
            root: Полюс в z-плоскости
            sample_rate: Частота дискретизации в Гц

        Returns:
            Резонанс или None, если полюс не соответствует форманте
        """
        radius = abs(root)
        if root.imag < 0 or not (self.min_pole_radius < radius < self.max_pole_radius):
            return None

        angle = math.atan2(root.imag, root.real)
        if angle <= 0:
            return None

        frequency = angle * sample_rate / c.TWO_PI
        bandwidth = -2.0 * math.log(radius) * sample_rate / c.TWO_PI
        if frequency <= self.min_formant_frequency or bandwidth <= 0:
            return None

        q = frequency / bandwidth
        if not (self.min_q < q < self.max_q):
            return None

        return Resonance(frequency=frequency, q=q)

    def resonances_from_roots(self, roots: Sequence[complex], sample_rate: float) -> List[Resonance]:
        """Отбирает допустимые полюса и сортирует резонансы по возрастанию частоты."""
        resonances = []
        for root in roots:
            resonance = self.pole_to_resonance(complex(root), sample_rate)
            if resonance is not None:
                resonances.append(resonance)
        return sorted(resonances, key=lambda r: r.frequency)


def find_resonances(lpc_coefficients: np.ndarray, sample_rate: float,
                    method: RootFinderMethod = "companion",
                    constraints: Optional[FormantConstraintHandler] = None) -> List[Resonance]:
    """
    Находит резонансы LPC-модели по корням её характеристического полинома.

    Ошибки поиска корней здесь не пробрасываются: они журналируются,
    а результатом становится пустой список.

    Args:
        lpc_coefficients: Коэффициенты a[0..p]
        sample_rate: Частота дискретизации в Гц
        method: Метод поиска корней
        constraints: Ограничения на полюса

    Returns:
        Резонансы по возрастанию частоты
    """
    constraints = constraints or FormantConstraintHandler()
    coefficients = np.asarray(lpc_coefficients, dtype=np.float64)
    if coefficients.size < 2 or sample_rate <= 0:
        return []

    # z^p + a1·z^(p-1) + ... + ap: коэффициенты по возрастанию степени
    try:
        roots = find_roots(coefficients[::-1], method=method)
    except PolynomialError as exc:
        log.warning('Ошибка поиска корней: %s', exc)
        return []

    resonances = constraints.resonances_from_roots(roots, sample_rate)
    log.debug('Найдено %d резонансов из %d корней', len(resonances), len(roots))
    return resonances


def merge_nearby_formants(formants: Sequence[Resonance], min_separation_mel: float) -> List[Resonance]:
    """
    Сливает форманты, расстояние между которыми по шкале мел меньше порога.

    Один проход слева направо по отсортированному списку: каждая форманта
    сравнивается с последней сохранённой. Частота слитой форманты - среднее,
    взвешенное по 1/ширине полосы, добротность - минимальная из двух.
    Список, в котором нет близких пар, возвращается без изменений.

    Args:
        formants: Резонансы по возрастанию частоты
        min_separation_mel: Минимальное расстояние в мел

    Returns:
        Новый список резонансов переменной длины (возможно пустой)
    """
    if not formants:
        return []

    merged = [formants[0]]
    for formant in formants[1:]:
        last = merged[-1]
        if hz_to_mel(formant.frequency) - hz_to_mel(last.frequency) < min_separation_mel:
            w_last = 1.0 / last.bandwidth
            w_current = 1.0 / formant.bandwidth
            frequency = (last.frequency * w_last + formant.frequency * w_current) / (w_last + w_current)
            merged[-1] = Resonance(frequency=float(frequency), q=min(last.q, formant.q))
        else:
            merged.append(formant)
    return merged


def filter_speech_formants(formants: Sequence[float],
                           min_formant: float = c.LEGACY_MIN_FORMANT,
                           max_formant: float = c.LEGACY_MAX_FORMANT,
                           min_distance: float = c.LEGACY_MIN_DISTANCE_HZ) -> List[float]:
    """
    Устаревшая фильтрация формант: оставляет частоты в диапазоне речи,
    сливает соседние частоты ближе min_distance Гц в их среднее до тех пор,
    пока такие пары есть, и дополняет список значением 9999 Гц до четырёх,
    чтобы индексы 0..3 всегда были доступны.

    Args:
        formants: Частоты в Гц

    Returns:
        Не менее четырёх частот в Гц
    """
    edited = sorted(f for f in formants if min_formant <= f <= max_formant)

    done = False
    while not done:
        done = True
        for index in range(len(edited) - 1):
            if abs(edited[index] - edited[index + 1]) < min_distance:
                edited[index] = (edited[index] + edited[index + 1]) / 2
                del edited[index + 1]
                edited.sort()
                done = False
                break

    while len(edited) < c.LEGACY_FORMANT_COUNT:
        edited.append(c.LEGACY_SENTINEL_FORMANT)
    return edited
