"""
Root logger setup.

Modules log through `logging.getLogger(__name__)` with `event key=value`
messages; this only decides where records go and how they look.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from . import config

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        # Already configured (uvicorn, pytest, or a previous create_app call).
        root.setLevel(getattr(logging, (level or config.log_level()).upper(), logging.INFO))
        return

    handler = logging.StreamHandler()
    if (fmt or config.log_format()) == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or config.log_level()).upper(), logging.INFO))
