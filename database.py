import logging
import sqlite3
from contextlib import contextmanager

import config
from database_schemas import ALL_SCHEMAS
from errors import DatabaseConnectionError, IntegrityViolation, QueryError

logger = logging.getLogger(__name__)

DB_NAME = config.DB_NAME
BUSY_TIMEOUT_SECONDS = 5


@contextmanager
def get_db():
    """Open a connection for one unit of work.

    Connections run in autocommit mode; multi-statement work goes through
    ``transaction()``. A new connection per call means a dropped store is
    picked up again on the next request.
    """
    try:
        conn = sqlite3.connect(DB_NAME, timeout=BUSY_TIMEOUT_SECONDS, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as e:
        raise DatabaseConnectionError(detail=str(e)) from e
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction():
    """Run several statements as one all-or-nothing unit.

    ``BEGIN IMMEDIATE`` takes the write lock up front, so concurrent
    read-modify-write sequences (toggle then recount) are serialized.
    """
    with get_db() as conn:
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise QueryError(detail=str(e)) from e
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        try:
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(detail=str(e)) from e


def _run(conn, query, params):
    try:
        cursor = conn.execute(query, tuple(params))
    except sqlite3.IntegrityError as e:
        raise IntegrityViolation(detail=str(e)) from e
    except sqlite3.Error as e:
        raise QueryError(detail=str(e)) from e
    if cursor.description is not None:
        return [dict(row) for row in cursor.fetchall()]
    return {"insert_id": cursor.lastrowid, "affected_rows": cursor.rowcount}


def execute(query: str, params=(), conn=None):
    """Execute one parameterized statement.

    Returns a list of dict rows for queries that produce rows, otherwise
    ``{"insert_id": ..., "affected_rows": ...}``. Pass ``conn`` to run
    inside an open ``transaction()``.
    """
    if conn is not None:
        return _run(conn, query, params)
    with get_db() as own_conn:
        return _run(own_conn, query, params)


def fetch_one(query: str, params=(), conn=None):
    rows = execute(query, params, conn=conn)
    return rows[0] if rows else None


def init_db():
    with transaction() as conn:
        for schema in ALL_SCHEMAS:
            execute(schema, conn=conn)
    logger.info("Database ready at %s", DB_NAME)


if __name__ == "__main__":
    init_db()
