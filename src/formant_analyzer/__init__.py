"""
formant_analyzer - извлечение формант гласных по LPC-модели.

Основная точка входа - analyze(samples, sample_rate): ресемплирование,
выбор вокализованного участка, LPC, корни полинома, слияние формант
и частотные характеристики для отображения.
"""

from formant_analyzer.config import AnalysisConfig
from formant_analyzer.models.formant import (
    AnalysisResult,
    FormantAnalyzer,
    LegacySpeechAnalyzer,
    Resonance,
    analyze,
)

__version__ = "1.0.0"

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "FormantAnalyzer",
    "LegacySpeechAnalyzer",
    "Resonance",
    "analyze",
]
