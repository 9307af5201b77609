"""
Logging setup. Call `setup_logging()` once at startup.
"""

from __future__ import annotations

import logging
import sys

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncpg")


def _parse_level(level: str) -> int:
    value = logging.getLevelName((level or "").strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(_parse_level(level))

    # uvicorn usually installs a handler; scripts and tests may not.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
