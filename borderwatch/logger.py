import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def setup_logger(settings, name="borderwatch", log_file="borderwatch.log"):
    """
    Attaches a rotating file handler and a stdout handler to the service
    logger. Safe to call more than once.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    # Check if handlers are already added to avoid duplicate logs
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, log_file),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    return logger
