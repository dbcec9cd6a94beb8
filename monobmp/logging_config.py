import logging
import logging.handlers
from pathlib import Path

_HANDLER_TAG = "_monobmp_handler"

def setup_logging(log_dir: Path = None, level: str = "INFO") -> logging.Logger:
    """Configure root logging: console, rotating file and an errors-only file."""
    if log_dir is None:
        log_dir = Path("./logs")

    log_dir.mkdir(parents=True, exist_ok=True)

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger()
    logger.setLevel(log_level)
    # Pillow logs every PNG chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)

    # Repeated calls (CLI + app import, tests) must not stack handlers
    for h in list(logger.handlers):
        if getattr(h, _HANDLER_TAG, False):
            logger.removeHandler(h)
            h.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "monobmp.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    error_handler = logging.FileHandler(log_dir / "monobmp_errors.log")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    for h in (console_handler, file_handler, error_handler):
        setattr(h, _HANDLER_TAG, True)
        logger.addHandler(h)

    return logger
