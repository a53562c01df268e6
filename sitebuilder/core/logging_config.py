"""
Central logging configuration.

Console output at ``settings.LOG_LEVEL``; uvicorn loggers share the handler.
"""
import logging
import sys
from logging.config import dictConfig

from sitebuilder.config import settings


def configure_logging() -> None:
    """Call once at process startup."""
    level = settings.LOG_LEVEL.upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": sys.stdout,
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
                "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
                "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
                # SQL echo is controlled by the engine, keep it out of INFO noise
                "sqlalchemy.engine": {"level": logging.WARNING},
            },
        }
    )
