"""Logging configuration for the Agora Stage process."""

from __future__ import annotations

import logging
import logging.config

_CONFIGURED = False


def configure_logging(level: str = "INFO") -> None:
    """Install a console handler for the ``agora_stage`` logger tree.

    Safe to call more than once; only the first call installs handlers,
    later calls just adjust the level.
    """
    global _CONFIGURED

    level = level.upper()
    if _CONFIGURED:
        logging.getLogger("agora_stage").setLevel(level)
        return

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s %(levelname)-8s %(name)s - %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                "agora_stage": {
                    "handlers": ["console"],
                    "level": level,
                },
            },
        }
    )
    _CONFIGURED = True
