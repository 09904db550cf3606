"""Logging setup.

Console logging always; rotating file logs when LOG_DIR is set.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from ncaa_api.config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: str | None = None, log_dir: str | None = None) -> None:
    """Configure the root logger once.

    Args:
        level: Log level name (default: LOG_LEVEL env, INFO)
        log_dir: Directory for ncaa_api.log / ncaa_api_errors.log (default: LOG_DIR env)
    """
    global _configured
    if _configured:
        return

    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    log_dir = log_dir or LOG_DIR
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(log_level)

    console = logging.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "ncaa_api.log"),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            os.path.join(log_dir, "ncaa_api_errors.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root.addHandler(error_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
