"""
Формантный анализ гласных.

Компоненты:
- core: конвейер анализа и точка входа analyze()
- lpc: оценка коэффициентов линейного предсказания
- roots: поиск корней полинома (Лагерр, сопровождающая матрица)
- constraints: отбор полюсов и слияние формант
- response: частотные характеристики и синтез
- legacy: анализатор первого поколения
"""

from formant_analyzer.models.formant.constraints import FormantConstraintHandler
from formant_analyzer.models.formant.core import FormantAnalyzer, analyze, get_formant_analyzer
from formant_analyzer.models.formant.legacy import LegacySpeechAnalyzer
from formant_analyzer.models.formant.types import AnalysisResult, IndexRange, LPCModel, Resonance

__all__ = [
    "AnalysisResult",
    "FormantAnalyzer",
    "FormantConstraintHandler",
    "IndexRange",
    "LPCModel",
    "LegacySpeechAnalyzer",
    "Resonance",
    "analyze",
    "get_formant_analyzer",
]
