"""
Exception classes for the dbutil package.
"""
import sqlite3

import psycopg
from sqlalchemy import exc as sa_exc


class DatabaseError(Exception):
    """Base class for all dbutil errors.
    """


class InvalidArgument(DatabaseError, ValueError):
    """Malformed or missing input to a conversion or helper function.
    """


class ReadOnlyError(DatabaseError):
    """Write attempted while the active spec is in read-only mode.
    """


# Driver errors are never wrapped; this group exists for except clauses.
CursorError = (
    sqlite3.Error,
    psycopg.Error,
    sa_exc.DBAPIError,
    )
