import logging
import os
from logging.handlers import RotatingFileHandler

from formant_analyzer.config import settings

LOG_FILE_NAME = "formant_analyzer.log"


def setup_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(settings.log_level.upper())

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(console_handler)

        if settings.log_to_file:
            os.makedirs(settings.logs_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(settings.logs_dir, LOG_FILE_NAME),
                maxBytes=1_000_000, backupCount=5, encoding="utf-8"
            )
            file_handler.setFormatter(logging.Formatter(
                "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            ))
            logger.addHandler(file_handler)

    return logger
