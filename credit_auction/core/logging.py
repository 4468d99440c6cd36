"""Logging setup shared by the API process and management scripts."""

from __future__ import annotations

from logging.config import dictConfig

from credit_auction.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    level = "DEBUG" if settings.debug else settings.logging.level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": settings.logging.format},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "credit_auction": {"level": level},
                "sqlalchemy.engine": {"level": "INFO" if settings.database.echo else "WARNING"},
            },
            "root": {"handlers": ["console"], "level": "WARNING"},
        }
    )
