import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pixbank.config import settings


def setup_request_logger() -> logging.Logger:
    """
    Set up the rotating file logger that receives one line per API request.

    Returns:
        logging.Logger: Configured logger instance
    """
    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("api_requests")
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Prevent duplicate handlers on re-import
    if logger.handlers:
        return logger

    file_handler = RotatingFileHandler(
        filename=logs_dir / "api_requests.log",
        maxBytes=settings.LOG_MAX_SIZE_MB * 1024 * 1024,
        backupCount=settings.LOG_MAX_FILES,
        encoding="utf-8",
    )

    formatter = logging.Formatter(fmt="[%(asctime)s] %(message)s")
    formatter.default_time_format = "%Y-%m-%d %H:%M:%S"
    formatter.default_msec_format = "%s.%03d"

    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def setup_app_logger() -> logging.Logger:
    """
    Set up the stdout logger for money-movement events and application errors.

    Kept apart from the request logger, which only writes to rotating files.

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger("pixbank")
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter(
            fmt="[%(asctime)s] [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    return logger


# Global logger instances
api_logger = setup_request_logger()
app_logger = setup_app_logger()
