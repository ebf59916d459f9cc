"""
Statement execution on the connection of the active spec.

SQL is passed to the driver unchanged, so placeholders follow the
driver's paramstyle (`?` for sqlite3, `%s` for psycopg).
"""
import logging
import time
from collections.abc import Iterator
from functools import wraps
from typing import Any

import sqlalchemy as sa
from dbutil.context import current_spec
from dbutil.cursor import row_seq
from dbutil.exceptions import CursorError, InvalidArgument
from dbutil.options import DbSpec, verify_writable
from dbutil.row import Row

__all__ = ['iter_select', 'select', 'execute', 'get_raw_connection']

logger = logging.getLogger(__name__)


def get_raw_connection(connection: Any) -> Any:
    """Extract the DB-API connection from a SQLAlchemy Connection."""
    if isinstance(connection, sa.Connection):
        return connection.connection
    return connection


def _connection(spec: DbSpec) -> Any:
    if spec.connection is None:
        raise InvalidArgument('No connection bound; use with_connection()')
    return get_raw_connection(spec.connection)


def dumpsql(func):
    """Decorator for logging SQL statements and parameters."""
    @wraps(func)
    def wrapper(sql: str, *args: Any, spec: DbSpec | None = None, **kwargs: Any):
        spec = spec or current_spec()
        if spec.show_sql:
            spec.show_sql_fn(sql)
        logger.debug(f'args: {args}')
        start = time.time()
        try:
            return func(sql, *args, spec=spec, **kwargs)
        except CursorError:
            logger.error(f'Error with query:\nSQL:\n{sql}\nargs: {args}')
            raise
        finally:
            logger.debug(f'Query time: {time.time() - start:.4f}s')
    return wrapper


def _open_cursor(spec: DbSpec, sql: str, args: tuple) -> Any:
    cursor = _connection(spec).cursor()
    if spec.fetch_size:
        cursor.arraysize = spec.fetch_size
    try:
        if args:
            cursor.execute(sql, args)
        else:
            cursor.execute(sql)
    except Exception:
        cursor.close()
        raise
    return cursor


@dumpsql
def _query(sql: str, *args: Any, spec: DbSpec) -> Any:
    return _open_cursor(spec, sql, args)


def _iter_rows(sql: str, args: tuple, spec: DbSpec) -> Iterator[Row]:
    cursor = _query(sql, *args, spec=spec)
    try:
        yield from row_seq(cursor, spec)
    finally:
        cursor.close()
        logger.debug('Closed cursor')


def iter_select(sql: str, *args: Any, spec: DbSpec | None = None) -> Iterator[Row]:
    """Execute a query and lazily yield its rows.

    The spec is resolved now; the statement runs when the first row is
    requested. The cursor is closed once the rows are exhausted or the
    iterator is closed.
    """
    return _iter_rows(sql, args, spec or current_spec())


def select(sql: str, *args: Any, spec: DbSpec | None = None) -> list[Row]:
    """Execute a query and return all rows.
    """
    return list(iter_select(sql, *args, spec=spec))


@dumpsql
def _execute(sql: str, *args: Any, spec: DbSpec) -> int:
    cursor = _open_cursor(spec, sql, args)
    try:
        rowcount = cursor.rowcount
    finally:
        cursor.close()
    _connection(spec).commit()
    return rowcount


def execute(sql: str, *args: Any, spec: DbSpec | None = None) -> int:
    """Execute a write statement, commit, and return the affected row count.

    Raises ReadOnlyError when the spec is read-only; the database is not
    touched in that case.
    """
    spec = spec or current_spec()
    verify_writable(spec)
    return _execute(sql, *args, spec=spec)
