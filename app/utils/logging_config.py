"""
Logging setup for deployed environments: console plus rotating app and error logs
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from app.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5

_configured = False


def configure_logging(logs_dir: str = "logs") -> logging.Logger:
    """Attach handlers to the root logger once per process"""
    global _configured
    root_logger = logging.getLogger()
    if _configured:
        return root_logger

    path = Path(logs_dir)
    path.mkdir(exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    file_handler = RotatingFileHandler(path / "app.log", maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    error_handler = RotatingFileHandler(path / "error.log", maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT)
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(error_handler)

    # Third-party chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _configured = True
    return root_logger
