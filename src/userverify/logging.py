"""Logging configuration based on environment."""

import logging
import sys

from userverify.config import settings

# Development format: cleaner
DEV_FORMAT = "%(levelname)s:     [%(component)s] %(message)s"

# Production format: full details for debugging
PROD_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(component)s] %(message)s"

# Loggers that carry token issue/consume events; raised to DEBUG in verbose mode
VERIFICATION_LOGGERS = (
    "userverify.services.verification",
    "userverify.services.schema",
    "userverify.services.store",
    "userverify.api.verification",
)


class ComponentFilter(logging.Filter):
    """Tag each record with the short component it came from.

    Records from this package get their last module name (``verification``,
    ``store``, ``email`` ...); everything else is tagged with its top-level
    logger name.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("userverify."):
            record.component = record.name.rsplit(".", 1)[-1]
        else:
            record.component = record.name.split(".", 1)[0]
        return True


def get_uvicorn_log_config() -> dict:
    """Get uvicorn log config that shares the component-tagged root handler."""
    log_format = DEV_FORMAT if settings.is_development else PROD_FORMAT

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"component": {"()": ComponentFilter}},
        "formatters": {
            "default": {"format": log_format},
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["component"],
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"level": "INFO"},
        },
        "root": {"handlers": ["default"], "level": settings.log_level},
    }


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ComponentFilter())
    handler.setFormatter(
        logging.Formatter(DEV_FORMAT if settings.is_development else PROD_FORMAT)
    )

    logging.basicConfig(level=getattr(logging, settings.log_level), handlers=[handler])

    if verbose:
        for name in VERIFICATION_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)

    # Quiet noisy loggers
    for name in ("httpx", "httpcore", "aiosmtplib", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)
