import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

from clinica.config import Settings, get_settings

ROOT_LOGGER_NAME = "clinica_api"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

_console_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
_file_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def _rotating(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT)
    handler.setLevel(level)
    handler.setFormatter(_file_format)
    return handler


def setup_logging(settings: Settings) -> logging.Logger:
    """Attach stdout, app.log and errors.log handlers to the service logger.

    Safe to call again: existing handlers are replaced, not duplicated.
    """
    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if settings.APP_DEBUG else logging.INFO
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(_console_format)
    root.addHandler(console)
    root.addHandler(_rotating(logs_dir / "app.log", logging.INFO))
    root.addHandler(_rotating(logs_dir / "errors.log", logging.ERROR))
    return root


logger = setup_logging(get_settings())


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance. If name is provided, returns a child logger."""
    if name:
        return logger.getChild(name)
    return logger
