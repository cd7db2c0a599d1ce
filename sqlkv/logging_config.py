"""
Logging Configuration Module

Applies a standard log format to the sqlkv and SQLAlchemy engine loggers.
Call setup_logging(debug=True) to see the statements a debug store logs.
"""

import logging
import logging.config
from typing import Optional

from sqlkv.config import get_settings


def setup_logging(debug: Optional[bool] = None):
    """
    Configure log format for the KV store
    Standardize log output format for the sqlkv and SQLAlchemy engine loggers.
    """
    if debug is None:
        debug = get_settings().KV_STORE_DEBUG
    log_level = "DEBUG" if debug else "INFO"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "sqlkv": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "INFO" if debug else "WARNING",
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)
