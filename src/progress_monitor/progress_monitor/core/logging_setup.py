from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Optional


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter.

    {"t": 1700000000000, "lvl": "INFO", "name": "mod", "msg": "text"}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    Level precedence: explicit `level`, then env LOG_LEVEL, then INFO.
    """
    root = logging.getLogger()
    if getattr(root, "_progress_monitor_configured", False):
        return

    lvl_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, lvl_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)
    root._progress_monitor_configured = True  # type: ignore[attr-defined]

    for name in ("urllib3", "werkzeug"):
        logging.getLogger(name).setLevel(logging.WARNING)
