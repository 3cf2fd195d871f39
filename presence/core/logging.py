"""
Logging configuration for the Presence attendance backend
"""
import logging
import sys
from presence.core.config import settings

# Third-party loggers that are too chatty at the application level
_LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "multipart": logging.WARNING,
}


def setup_logging() -> None:
    """
    Configure stdout logging once for the process.

    Level comes from settings.LOG_LEVEL. Attendance decisions are logged by
    the engine (accepted at INFO, rejections at WARNING), collaborator
    failures at ERROR.
    """
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    for name, library_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)
    if level == logging.DEBUG:
        # SQL statements are only worth seeing when debugging
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s env=%s tz=%s",
        settings.LOG_LEVEL, settings.APP_ENV, settings.ATTENDANCE_TZ,
    )
