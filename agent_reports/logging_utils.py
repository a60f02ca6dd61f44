"""
Structured logging helpers for reporting client workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_CONFIGURED = False


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for CLI and Streamlit entrypoints.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    _CONFIGURED = True
