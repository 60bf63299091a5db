from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection

log = logging.getLogger(__name__)

Row = Dict[str, Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error."""
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        log.debug("rolling back transaction", exc_info=True)
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Row]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Row]:
    return list(cur.fetchall() or [])


def optional_float(value: Any) -> Optional[float]:
    # DECIMAL columns arrive as Decimal.
    if value is None:
        return None
    return float(value)


def optional_bool(value: Any) -> Optional[bool]:
    """TINYINT(1) NULL column."""
    return None if value is None else bool(int(value))


def dump_json(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value, ensure_ascii=False)


def load_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON TEXT column; empty or NULL gives `default`."""
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if value is None or value == "":
        return default
    return json.loads(value) if isinstance(value, str) else value
