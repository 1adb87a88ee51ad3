from __future__ import annotations

import logging
import os
from typing import Optional


ENV_LOG_LEVEL = "SHEET_TALLY_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_log_level(default: str = "WARNING") -> int:
    name = (os.getenv(ENV_LOG_LEVEL) or default).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: Optional[int] = None) -> None:
    """Install one stderr handler on the root logger. Safe to call twice."""
    logging.basicConfig(
        level=level if level is not None else resolve_log_level(),
        format=LOG_FORMAT,
    )
