"""
Модуль: legacy.py
Описание: Анализатор первого поколения: LPC порядка 10 по прореженному
участку гласной без окна и предыскажения, корни методом Лагерра и
фильтрация формант с дополнением до четырёх значений.

Сохранён для воспроизведения эталонных записей и сравнения с основным
конвейером (core.py).
"""

from typing import List, Sequence

import numpy as np

from formant_analyzer import constants as c
from formant_analyzer.exceptions import PolynomialError
from formant_analyzer.log import setup_logger
from formant_analyzer.models.formant.constraints import filter_speech_formants
from formant_analyzer.models.formant.lpc import estimate_legacy_lpc
from formant_analyzer.models.formant.response import legacy_lpc_response
from formant_analyzer.models.formant.roots import find_roots_laguerre
from formant_analyzer.services import preprocessing

log = setup_logger("formant_legacy")


def root_frequencies(coefficients: np.ndarray, sample_rate: float) -> List[float]:
    """
    Частоты (Гц) всех корней полинома a[0] + a[1]·z + ... + a[p]·z^p
    по возрастанию, без какой-либо фильтрации.
    """
    try:
        roots = find_roots_laguerre(coefficients)
    except PolynomialError as exc:
        log.warning('Ошибка поиска корней (устаревший конвейер): %s', exc)
        return []
    return sorted(float(np.angle(root)) * sample_rate / c.TWO_PI for root in roots)


class LegacySpeechAnalyzer:
    """
    Устаревший анализатор речевого сигнала.

    Все этапы выполняются один раз в конструкторе; результаты доступны
    как атрибуты и не пересчитываются:

    - decimation_factor, decimated_rate
    - strong_part, vowel_part: полуоткрытые диапазоны (start, stop)
    - vowel_samples_decimated
    - estimated_lpc_coefficients: LPC порядка 10
    - response_frequencies, synthesized_frequency_response
    - raw_formants: частоты всех корней
    - formants: не менее четырёх формант (недостающие равны 9999 Гц)
    """

    def __init__(self, samples: Sequence[float], sample_rate: int):
        """
        Args:
            samples: Отсчёты (int16 или float)
            sample_rate: Частота дискретизации в Гц
        """
        self.samples = np.array(samples).ravel()
        self.samples.setflags(write=False)
        self.sample_rate = int(sample_rate)

        self.decimation_factor = preprocessing.decimation_factor(self.sample_rate,
                                                                 c.LEGACY_DECIMATION_TARGET_RATE)
        self.decimated_rate = self.sample_rate // self.decimation_factor

        self.strong_part = preprocessing.find_strong_part(self.samples, c.LEGACY_STRONG_PART_CHUNKS,
                                                          c.LEGACY_STRONG_PART_SENSITIVITY)
        self.vowel_part = preprocessing.truncate_tails(*self.strong_part, c.LEGACY_TAIL_PORTION)
        start, stop = self.vowel_part
        self.vowel_samples_decimated = preprocessing.decimate(self.samples[start:stop], self.decimation_factor)

        self.estimated_lpc_coefficients = estimate_legacy_lpc(self.vowel_samples_decimated, c.LEGACY_LPC_ORDER)
        log.debug('Устаревшие LPC-коэффициенты: %s', np.array2string(self.estimated_lpc_coefficients, precision=6))

        # Частоты 0, 15, 30, ... Гц ниже частоты Найквиста
        self.response_frequencies = np.arange(0, self.decimated_rate // 2, c.LEGACY_RESPONSE_STEP_HZ,
                                              dtype=np.float64)
        self.synthesized_frequency_response = legacy_lpc_response(
            self.estimated_lpc_coefficients, self.decimated_rate, self.response_frequencies
        )

        self.raw_formants = root_frequencies(self.estimated_lpc_coefficients, self.decimated_rate)
        self.formants = filter_speech_formants(self.raw_formants)
        log.info('Форманты (устаревший конвейер): %s',
                 ', '.join(f'{f:.1f}' for f in self.formants[:c.LEGACY_FORMANT_COUNT]))

    def downsample_strong_part(self, sample_count: int) -> np.ndarray:
        """Максимумы фрагментов сильного участка для графика."""
        start, stop = self.strong_part
        if sample_count <= 0 or stop <= start:
            return self.samples[:0].copy()
        return preprocessing.downsample_peaks(self.samples[start:stop], sample_count)

    def downsample(self, sample_count: int) -> np.ndarray:
        """Максимумы фрагментов всего сигнала для графика."""
        return preprocessing.downsample_peaks(self.samples, sample_count)
