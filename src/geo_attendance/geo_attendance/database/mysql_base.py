from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import UpstreamFailure
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) and commit on success.

    IntegrityError is re-raised untouched so repositories can map it to a
    domain conflict; every other connector error becomes UpstreamFailure.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Database connection failed: %s", exc)
        raise UpstreamFailure("Database is unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError:
        conn.rollback()
        raise
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.error("Database query failed: %s", exc)
        raise UpstreamFailure("Database query failed") from exc
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
