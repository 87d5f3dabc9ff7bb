# opportunity_hunter/logging_config.py
from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, Optional


def get_logging_config(level: str = "INFO", log_file: Optional[str] = None) -> Dict[str, Any]:
    level = (level or "INFO").upper()

    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "standard",
            "stream": sys.stderr,
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s [%(levelname)8s] %(name)s:%(lineno)d %(funcName)s(): %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "opportunity_hunter": {
                "level": "DEBUG" if log_file else level,
                "handlers": list(handlers),
                "propagate": False,
            },
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Console logging at `level`, plus a rotating debug log when `log_file` is set."""
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_config(level, log_file))

    # quieter third-party loggers
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
