import logging
import os
from typing import Optional
from saunaflow.utils import BASE_DIR


def _default_level() -> int:
    level_name = os.getenv("SAUNAFLOW_LOG_LEVEL", "DEBUG").upper()
    return getattr(logging, level_name, logging.DEBUG)


def setup_logger(
    name: str,
    log_file: str = "app.log",
    level: Optional[int] = None,
    console: bool = True,
    handler_level: Optional[int] = None,
) -> logging.Logger:
    """Configure and return a module-level logger."""
    log_dir = os.getenv("SAUNAFLOW_LOG_DIR") or os.path.join(BASE_DIR, "logs")
    os.makedirs(log_dir, exist_ok=True)
    full_log_file_path = os.path.join(log_dir, log_file)
    level = level if level is not None else _default_level()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler = logging.FileHandler(full_log_file_path)
        file_handler.setLevel(handler_level or level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(handler_level or level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    return logger
