"""
Process-wide logging: chatter (DEBUG/INFO) on stdout, problems
(WARNING and up) on stderr, one shared line format.
"""

import logging
import sys
from typing import Optional

from app.core.config import get_settings

_LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
)

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def build_handlers() -> list[logging.Handler]:
    """stdout handler for routine records, stderr handler for the rest."""
    out = logging.StreamHandler(sys.stdout)
    out.addFilter(_BelowWarning())

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.WARNING)
    return [out, err]


def setup_logging(level: Optional[str] = None) -> str:
    """
    Configure the root logger once and line uvicorn's loggers up with it.

    *level* defaults to ``Settings.log_level``. Returns the level in the
    lower-case form ``uvicorn.Config(log_level=...)`` expects.
    """
    level = (level or get_settings().log_level).upper()

    # no-op when the root logger already has handlers (e.g. under pytest)
    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=build_handlers())

    for name in _UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(level)
    return level.lower()
