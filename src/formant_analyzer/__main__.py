"""Точка входа formant_analyzer как модуля."""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from pydantic import ValidationError

from formant_analyzer.config import AnalysisConfig
from formant_analyzer.log import setup_logger
from formant_analyzer.models.formant import LegacySpeechAnalyzer, analyze
from formant_analyzer.services.audio_io import load_raw_pcm16, load_wav

log = setup_logger('main')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='formant_analyzer',
        description='Извлечение формант гласной из записи (.wav или .raw 16 бит PCM)',
    )
    parser.add_argument('file', type=Path, help='Путь к записи')
    parser.add_argument('--rate', type=int, default=None,
                        help='Частота дискретизации .raw-файла в Гц (обязательна для .raw)')
    parser.add_argument('--order', type=int, default=None, help='Порядок LPC-модели')
    parser.add_argument('--legacy', action='store_true', help='Устаревший конвейер (LPC порядка 10)')
    parser.add_argument('--root-finder', choices=['companion', 'laguerre'], default=None,
                        help='Метод поиска корней полинома')
    return parser


def load_samples(path: Path, rate: Optional[int]) -> tuple[np.ndarray, int]:
    """Загружает запись; для .raw частота берётся из аргумента --rate."""
    if path.suffix.lower() == '.raw':
        if not rate:
            raise ValueError('Для .raw-файла нужно указать --rate')
        return load_raw_pcm16(path, rate), rate
    return load_wav(path)


def _format_array(values) -> str:
    return ' '.join(f'{value:.6f}' for value in values)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Главная функция: анализ одного файла и печать результата."""
    args = build_parser().parse_args(argv)

    try:
        samples, sample_rate = load_samples(args.file, args.rate)
    except (RuntimeError, ValueError) as exc:
        log.error('Не удалось загрузить запись: %s', exc)
        sys.exit(1)

    if args.legacy:
        analyzer = LegacySpeechAnalyzer(samples, sample_rate)
        print(f'LPC: {_format_array(analyzer.estimated_lpc_coefficients)}')
        print('Форманты (Гц): ' + ', '.join(f'{f:.1f}' for f in analyzer.formants))
        return

    changes = {}
    if args.order is not None:
        changes['lpc_model_order'] = args.order
    if args.root_finder is not None:
        changes['root_finder'] = args.root_finder
    try:
        config = AnalysisConfig().replace(**changes)
    except ValidationError as exc:
        log.error('Неверные параметры анализа: %s', exc)
        sys.exit(2)

    result = analyze(samples, sample_rate, config)
    print(f'LPC: {_format_array(result.lpc_coefficients)}')
    print(f'Усиление: {result.lpc_gain:.6f}')
    if result.formants:
        for index, formant in enumerate(result.formants, start=1):
            print(f'F{index}: {formant}')
    else:
        print('Форманты не найдены')


if __name__ == '__main__':
    main()
