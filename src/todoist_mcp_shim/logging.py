"""Stderr-only logging for the shim.

Under the stdio transport stdout carries the MCP stream, so no handler here
may write to it. LOG_LEVEL and LOG_FORMAT override the defaults below.

    from todoist_mcp_shim.logging import get_logger
    LOG = get_logger(__name__)
"""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Any, Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_state = {"configured": False}


def _resolve_level(name: Optional[str]) -> int:
    name = (name or os.environ.get("LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(name)
    # Unknown names come back as "Level X" strings
    return level if isinstance(level, int) else logging.INFO


def _dict_config(level: int, fmt: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"shim": {"format": fmt}},
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "shim",
            }
        },
        "root": {"level": level, "handlers": ["stderr"]},
    }


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install the stderr handler on first use; later calls only change the level."""
    if _state["configured"]:
        logging.getLogger().setLevel(_resolve_level(level))
        return
    fmt = fmt or os.environ.get("LOG_FORMAT", DEFAULT_FORMAT)
    logging.config.dictConfig(_dict_config(_resolve_level(level), fmt))
    _state["configured"] = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
