"""Logging setup for applications embedding the volume loader.

The ``nifti``, ``fetch`` and ``loader`` packages only create module loggers;
the host application calls :func:`configure_logging` once at startup.
Decoder diagnostics go through the ``nifti`` loggers, so ``NIFTI_LOG_LEVEL``
controls whether fallback and range warnings are shown.
"""

from __future__ import annotations

import logging.config
import os
from typing import Any, Optional


_CONFIGURED = False

_PACKAGE_LEVEL_ENV = {
    "nifti": "NIFTI_LOG_LEVEL",
    "fetch": "NIFTI_FETCH_LOG_LEVEL",
    "loader": "NIFTI_FETCH_LOG_LEVEL",
}


def build_logging_config(level_name: str) -> dict[str, Any]:
    handler = {
        "class": "logging.StreamHandler",
        "formatter": "standard",
        "stream": "ext://sys.stdout",
    }
    loggers: dict[str, dict[str, Any]] = {
        package: {"level": os.getenv(env_name, level_name).upper()}
        for package, env_name in _PACKAGE_LEVEL_ENV.items()
    }
    # Request-level chatter stays out unless asked for.
    loggers["aiohttp"] = {
        "level": os.getenv("AIOHTTP_LOG_LEVEL", "WARNING").upper(),
        "handlers": ["stdout"],
        "propagate": False,
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {"stdout": handler},
        "root": {"level": level_name, "handlers": ["stdout"]},
        "loggers": loggers,
    }


def configure_logging(default_level: Optional[str] = None) -> None:
    """Route loader logs to stdout; later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (default_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.config.dictConfig(build_logging_config(level_name))
    _CONFIGURED = True
