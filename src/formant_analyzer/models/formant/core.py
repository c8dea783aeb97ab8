"""
Модуль: core.py
Описание: Конвейер формантного анализа одного буфера записи.
Ресемплирование и предыскажение -> энергетическая разметка и выбор гласной ->
оконное взвешивание -> LPC -> корни полинома -> резонансы -> слияние формант ->
частотные характеристики и синтез для контроля на слух.
"""

import dataclasses
from typing import Optional, Sequence

import numpy as np

from formant_analyzer.config import AnalysisConfig
from formant_analyzer.log import setup_logger
from formant_analyzer.models.formant.constraints import (
    FormantConstraintHandler,
    find_resonances,
    merge_nearby_formants,
)
from formant_analyzer.models.formant.lpc import estimate_lpc
from formant_analyzer.models.formant.response import (
    lpc_frequency_response,
    resonance_frequency_response,
    sample_spectrum,
    synthesize_voiced,
)
from formant_analyzer.models.formant.types import AnalysisResult
from formant_analyzer.services import preprocessing

log = setup_logger("formant_core")


class FormantAnalyzer:
    """
    Анализатор формант гласного звука.

    Состояние анализатора - только конфигурация; каждый вызов analyze()
    независим и возвращает новый неизменяемый AnalysisResult. Вырожденный
    вход (пустой буфер, тишина, слишком короткий фрейм) даёт допустимый,
    но пустой результат вместо исключения.

    Возвращаемый список формант имеет переменную длину (в том числе нулевую):
    форманты не дополняются служебными значениями.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None,
                 frequencies: Optional[Sequence[float]] = None):
        """
        Инициализирует анализатор формант.

        Args:
            config: Параметры анализа
            frequencies: Сетка частот (Гц) для частотных характеристик
        """
        self.config = config or AnalysisConfig()
        self.frequencies = np.asarray(
            self.config.frequency_grid if frequencies is None else frequencies, dtype=np.float64
        )
        self.constraints = FormantConstraintHandler.from_config(self.config)

    def analyze(self, samples: Sequence[float], sample_rate: float) -> AnalysisResult:
        """
        Выполняет полный анализ буфера.

        Args:
            samples: Амплитуды в диапазоне [-1, 1]
            sample_rate: Частота дискретизации в Гц

        Returns:
            Результат анализа
        """
        config = self.config
        samples = np.asarray(samples, dtype=np.float64).ravel()

        if samples.size == 0 or not sample_rate > 0:
            log.warning('Пустой буфер или неверная частота дискретизации (%s Гц), анализ пропущен', sample_rate)
            return AnalysisResult.empty(config, self.frequencies, samples, float(sample_rate))

        rate = config.resample_rate
        raw_resampled = preprocessing.resample(samples, sample_rate, rate)
        resampled = preprocessing.preemphasize(raw_resampled, config.preemphasis_coefficient)
        resampled_response = sample_spectrum(resampled, rate, self.frequencies)

        chunk_powers = preprocessing.frame_energy(resampled, rate, config.framing_chunk_duration)
        power_frame = preprocessing.find_voiced_range(chunk_powers, config.framing_power_threshold)
        if power_frame is None:
            log.warning('Не найден вокализованный участок, возвращается пустой результат')
            return dataclasses.replace(
                AnalysisResult.empty(config, self.frequencies, samples, sample_rate),
                resampled_samples=resampled,
                chunk_powers=chunk_powers,
                resampled_frequency_response=resampled_response,
            )

        frame = preprocessing.trim_range(power_frame, config.framing_trim_factor)
        vowel_samples = resampled[frame.as_slice()]
        windowed = preprocessing.apply_window(vowel_samples, config.cosine_window_alpha)
        log.debug('Участок гласной: %d..%d (%d отсчётов)', frame.start, frame.end, vowel_samples.size)

        lpc = estimate_lpc(windowed, config.lpc_model_order)
        raw_resonances = find_resonances(lpc.coefficients, rate, config.root_finder, self.constraints)
        formants = merge_nearby_formants(raw_resonances, config.min_formant_separation_mel)
        log.debug('Резонансов до слияния: %d, после: %d', len(raw_resonances), len(formants))

        result = AnalysisResult(
            original_samples=samples,
            original_sample_rate=sample_rate,
            configuration=config,
            resampled_samples=resampled,
            chunk_powers=chunk_powers,
            power_frame=power_frame,
            frame=frame,
            vowel_samples=vowel_samples,
            frequencies=self.frequencies,
            resampled_frequency_response=resampled_response,
            windowed_vowel_frequency_response=sample_spectrum(windowed, rate, self.frequencies),
            lpc_coefficients=lpc.coefficients,
            lpc_gain=lpc.gain,
            lpc_polynomial_roots=raw_resonances,
            lpc_frequency_response=lpc_frequency_response(lpc.coefficients, lpc.gain, rate, self.frequencies),
            lpc_voiced_samples=synthesize_voiced(raw_resonances, rate, config.voiced_sample_duration,
                                                 config.voiced_f0),
            formants=formants,
            formants_frequency_response=resonance_frequency_response(formants, rate, self.frequencies),
            formants_voiced_samples=synthesize_voiced(formants, rate, config.voiced_sample_duration,
                                                      config.voiced_f0),
        )
        log.debug('Итог анализа: %s', result.summary())
        log.info('Форманты: %s', ', '.join(str(f) for f in formants) or 'не найдены')
        return result


def analyze(samples: Sequence[float], sample_rate: float, config: Optional[AnalysisConfig] = None,
            frequencies: Optional[Sequence[float]] = None) -> AnalysisResult:
    """
    Анализирует буфер записи и возвращает форманты с промежуточными артефактами.

    Args:
        samples: Амплитуды в диапазоне [-1, 1]
        sample_rate: Частота дискретизации в Гц
        config: Параметры анализа (по умолчанию AnalysisConfig())
        frequencies: Сетка частот (Гц) для частотных характеристик

    Returns:
        Неизменяемый результат анализа
    """
    return FormantAnalyzer(config, frequencies).analyze(samples, sample_rate)


def get_formant_analyzer() -> FormantAnalyzer:
    """
    Создает и возвращает экземпляр анализатора формант.

    Returns:
        Экземпляр FormantAnalyzer
    """
    return FormantAnalyzer()
