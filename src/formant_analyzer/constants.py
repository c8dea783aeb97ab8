"""Все константы проекта formant_analyzer.

Физические и численные параметры, которые не должны меняться
через .env. Настраиваемые параметры анализа находятся в config.py.
"""

import math

# ── Уровни ───────────────────────────────────────
SILENT_DB_LEVEL = -100.0
SPECTRUM_MAGNITUDE_FLOOR = 1e-6
LPC_MAGNITUDE_FLOOR = 1e-9
RESONATOR_DENOMINATOR_FLOOR = 1e-12
RESONANCE_RESPONSE_OFFSET_DB = -40.0

# ── Шкала мел ────────────────────────────────────
MEL_SCALE_FACTOR = 2595.0
MEL_BREAK_FREQUENCY = 700.0

# Сетка частот по умолчанию: 30..2400 мел с шагом 24 (≈20..5100 Гц)
FREQUENCY_GRID_MEL_START = 30.0
FREQUENCY_GRID_MEL_STOP = 2400.0
FREQUENCY_GRID_MEL_STEP = 24.0

# ── Аналитические значения по умолчанию ─────────
DEFAULT_RESAMPLE_RATE = 10_000.0
DEFAULT_PREEMPHASIS = 0.95
DEFAULT_CHUNK_DURATION_S = 0.025
DEFAULT_POWER_THRESHOLD = 0.1
DEFAULT_TRIM_FACTOR = 0.1
HAMMING_ALPHA = 25.0 / 46.0
HANN_ALPHA = 0.5
RECTANGULAR_ALPHA = 1.0
DEFAULT_LPC_ORDER = 12
DEFAULT_MIN_SEPARATION_MEL = 50.0
DEFAULT_VOICED_DURATION_S = 1.5
DEFAULT_VOICED_F0 = 100.0
VOICED_PEAK_AMPLITUDE = 0.9
VOICED_SILENCE_FLOOR = 1e-5

# ── Допустимые полюса ────────────────────────────
MIN_POLE_RADIUS = 0.7
MAX_POLE_RADIUS = 1.0
MIN_FORMANT_FREQUENCY = 70.0
MIN_FORMANT_Q = 2.0
MAX_FORMANT_Q = 80.0

# ── Поиск корней ─────────────────────────────────
LAGUERRE_CYCLES = 8
LAGUERRE_STEPS_PER_CYCLE = 10
LAGUERRE_MAX_ITERATIONS = LAGUERRE_CYCLES * LAGUERRE_STEPS_PER_CYCLE
LAGUERRE_EPSILON = 1e-7
LAGUERRE_BREAKOUT_FRACTIONS = (0.0, 0.5, 0.25, 0.75, 0.125, 0.375, 0.625, 0.875, 1.0)
IMAGINARY_SNAP_RATIO = 2.0e-6
COEFFICIENT_TOLERANCE = 1e-12
COEFFICIENT_RELATIVE_TOLERANCE = 1e-15
ROOT_VALIDATION_TOLERANCE = 1e-10
ROOT_REJECTION_FACTOR = 100.0

# ── Устаревший конвейер (SpeechAnalyzer) ─────────
LEGACY_LPC_ORDER = 10
LEGACY_DECIMATION_TARGET_RATE = 10_000
LEGACY_STRONG_PART_CHUNKS = 300
LEGACY_STRONG_PART_SENSITIVITY = 0.1
LEGACY_TAIL_PORTION = 0.15
LEGACY_RESPONSE_STEP_HZ = 15
LEGACY_MIN_FORMANT = 50.0
LEGACY_MAX_FORMANT = 5000.0
LEGACY_MIN_DISTANCE_HZ = 10.0
LEGACY_FORMANT_COUNT = 4
LEGACY_SENTINEL_FORMANT = 9999.0

# ── Аудио ────────────────────────────────────────
PCM16_SCALE = 32768.0

TWO_PI = 2.0 * math.pi
