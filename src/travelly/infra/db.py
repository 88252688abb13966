"""Postgres connection handling for the booking ledger (psycopg2, raw SQL).

- get_conn(): new connection from DATABASE_URL (+ DB_PASSWORD)
- txn(): one short transaction per unit of work
- lock_row(): SELECT ... FOR UPDATE inside the caller's transaction
- storage_errors(): connection failures become StorageUnavailableError
"""

import os
from contextlib import contextmanager
from typing import Any, Iterator, Sequence
from urllib.parse import urlparse

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor

from travelly.domain.errors import StorageUnavailableError


def _dsn_has_password(dsn: str) -> bool:
    if "://" in dsn:
        return bool(urlparse(dsn).password)
    return any(token.startswith("password=") for token in dsn.split())


def get_conn() -> PgConnection:
    """Open a connection to the booking database.

    DATABASE_URL may be a libpq DSN or a postgres:// URL. DB_PASSWORD is
    passed separately only when the DSN carries no password.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
        psycopg2.Error: On connection failure.
    """
    dsn = os.environ.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL environment variable not set")

    db_password = os.environ.get("DB_PASSWORD")
    if db_password and not _dsn_has_password(dsn):
        return psycopg2.connect(dsn, password=db_password)
    return psycopg2.connect(dsn)


@contextmanager
def storage_errors() -> Iterator[None]:
    """Re-raise transient psycopg2 failures as StorageUnavailableError."""
    try:
        yield
    except (psycopg2.OperationalError, psycopg2.InterfaceError) as exc:
        raise StorageUnavailableError(str(exc).strip() or "Database unavailable") from exc


@contextmanager
def txn(conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Run the block in one transaction: commit on success, roll back on error.

    A connection opened here is closed on exit; a passed-in one is left open.
    """
    owns_conn = conn is None
    if owns_conn:
        conn = get_conn()

    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if owns_conn:
            conn.close()


def lock_row(
    cur: PgCursor,
    query: str,
    params: Sequence[Any] | None = None,
    *,
    nowait: bool = False,
) -> tuple[Any, ...] | None:
    """Run a single-row SELECT with FOR UPDATE and return the row.

    The lock is held until the surrounding transaction ends. With nowait,
    a row already locked by another transaction raises instead of waiting.
    """
    suffix = " FOR UPDATE NOWAIT" if nowait else " FOR UPDATE"
    cur.execute(query.rstrip().rstrip(";") + suffix, params)
    return cur.fetchone()
