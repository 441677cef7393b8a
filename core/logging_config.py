"""Logging setup shared by the API process and scripts."""

import logging.config
from typing import Optional

from core.settings import get_settings


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "[{levelname}] {asctime} {name} - {message}",
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
            },
        },
        "loggers": {
            "core": {"level": level},
            "modules": {"level": level},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
    }


def configure_logging(level: Optional[str] = None) -> None:
    level = level or get_settings().log_level
    logging.config.dictConfig(build_logging_config(level))
