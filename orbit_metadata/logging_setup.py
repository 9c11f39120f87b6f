# ==============================================
# Logging Setup
# ==============================================
#
# Root logger configured once with one JSON object per line, so
# embed/read runs can be grepped and shipped without a parser.
#
#   { "t": 1712000000000, "lvl": "INFO", "name": "orbit_metadata.x",
#     "msg": "text", "extra": {...} }
#
# Level precedence: explicit argument, then LOG_LEVEL, then INFO.
# ==============================================

import json
import logging
import os
import sys
import time
from typing import Optional


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload["extra"] = extra
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    root = logging.getLogger()
    if getattr(root, "_orbit_configured", False):
        return

    lvl_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, lvl_name, logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    # stderr keeps stdout free for packets and reports printed by the CLI
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)
    # SchemaAmbiguityWarning and friends go through the same handler
    logging.captureWarnings(True)
    root._orbit_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Module logger. Configuration is left to setup_logging() at the entry point."""
    return logging.getLogger(name)
