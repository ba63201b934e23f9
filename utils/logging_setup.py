from __future__ import annotations

import logging
import sys
from typing import Any

from config.settings import get_settings


_INITIALIZED: bool = False

# SDK/transport loggers that echo every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "urllib3")

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "step=%(step)s status=%(status)s duration_ms=%(duration_ms)s "
    "provider=%(provider)s error=%(error)s request_id=%(request_id)s"
)


class SafeExtraFormatter(logging.Formatter):
    """Renders the chat/import ``extra`` fields, filling ``-`` for any not supplied."""

    DEFAULTS: dict[str, Any] = {
        "step": "-",
        "status": "-",
        "duration_ms": "-",
        "provider": "-",
        "error": "-",
        "request_id": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def init_logging(level: str | None = None) -> None:
    """Configure the root logger once per process; later calls are no-ops."""
    global _INITIALIZED
    if _INITIALIZED:
        return

    log_level = getattr(logging, (level or get_settings().log_level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(SafeExtraFormatter(fmt=LOG_FORMAT))
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    _INITIALIZED = True
