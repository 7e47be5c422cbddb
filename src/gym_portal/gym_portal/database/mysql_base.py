from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..common.datetime_utils import ensure_aware
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_bool(value: Any) -> bool:
    """Normalize MySQL TINYINT(1)/BIT values.

    mysql-connector can return booleans as:
    - int (0/1)
    - bytes (b'\\x00' / b'\\x01') for BIT columns
    - string ('0'/'1') with some charsets
    """

    if value is None:
        return False

    if isinstance(value, bool):
        return value

    if isinstance(value, (bytes, bytearray)):
        return any(value)

    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}

    return bool(int(value))


def optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def to_db_datetime(value: datetime) -> datetime:
    # DATETIME columns hold naive UTC
    return ensure_aware(value).astimezone(timezone.utc).replace(tzinfo=None)
