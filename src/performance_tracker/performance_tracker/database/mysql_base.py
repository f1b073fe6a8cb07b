from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import PersistenceError
from .connection import DatabaseConnection

LOGGER = logging.getLogger(__name__)


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
    except (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError) as e:
        try:
            conn.rollback()
        except mysql.connector.Error:
            LOGGER.debug("rollback failed on a broken connection", exc_info=True)
        raise PersistenceError(str(e)) from e
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


def is_duplicate_key(err: mysql.connector.Error) -> bool:
    return getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def load_json_list(value: Any) -> List[Dict[str, Any]]:
    """Normalize a MySQL JSON column value into a list of dicts.

    mysql-connector can return JSON as:
    - str (pure-python connector)
    - bytes / bytearray (C extension)
    - already-decoded list
    """

    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    if not isinstance(value, list):
        raise TypeError(f"Unsupported JSON column value type: {type(value)!r}")
    return [dict(item) for item in value]
