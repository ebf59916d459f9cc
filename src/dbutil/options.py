"""The database spec: settings in effect for a logical unit of work.

Well-known keys:

datasource     SQLAlchemy Engine (default None). Bind `dbmetadata` with it
               when a cached copy is available.
connection     SQLAlchemy Connection or raw DB-API connection (default None).
dbmetadata     dict, usually the result of `dbutil.metadata.dbmeta`.
catalog        catalog name as a host form; convert with `to_db_identifier`.
schema         schema name as a host form; convert with `to_db_identifier`.
read_only      when true, reads run as usual and writes raise ReadOnlyError.
show_sql       when true, statements are passed to `show_sql_fn`.
show_sql_fn    callable taking the SQL string; logs at INFO by default.
to_db          Python form -> database identifier.
to_host        database identifier -> Python form.
fetch_size     rows per round trip (cursor arraysize), 0 for driver default.
query_timeout  seconds before a statement times out, 0 for none.
extras         library specific keys; use a unique prefix such as
               'com.foo.pool-name' to avoid collisions.

Libraries may derive new specs with `DbSpec.assoc` but must not alter the
meaning of the well-known keys.
"""
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Self

import sqlalchemy as sa
from dbutil.exceptions import InvalidArgument, ReadOnlyError
from dbutil.naming import default_to_db, default_to_host

__all__ = [
    'DbSpec',
    'DEFAULT_SPEC',
    'log_sql',
    'assoc_datasource',
    'assoc_readonly',
    'is_read_only',
    'verify_writable',
    'config_from_datasource',
    'config_from_connection',
    'make_dbspec',
]

logger = logging.getLogger('dbutil.query')


def log_sql(sql: str) -> None:
    """Default `show_sql_fn`."""
    logger.info(f'SQL:\n{sql}')


@dataclass(frozen=True)
class DbSpec:
    """Options

    A frozen dataclass: derive modified copies with `assoc`.
    """
    datasource: Any = None
    connection: Any = None
    dbmetadata: dict = field(default_factory=dict)
    catalog: Any = None
    schema: Any = None
    read_only: bool = False
    show_sql: bool = True
    show_sql_fn: Callable[[str], Any] = log_sql
    to_db: Callable[[Any], Any] = default_to_db
    to_host: Callable[[str], Any] = default_to_host
    fetch_size: int = 1000
    query_timeout: int = 0
    extras: dict = field(default_factory=dict)

    def __post_init__(self):
        for name in ('show_sql_fn', 'to_db', 'to_host'):
            if not callable(getattr(self, name)):
                raise InvalidArgument(f'{name} must be callable')
        if self.fetch_size < 0:
            raise InvalidArgument(f'fetch_size must be >= 0, got {self.fetch_size}')
        if self.query_timeout < 0:
            raise InvalidArgument(f'query_timeout must be >= 0, got {self.query_timeout}')

    def assoc(self, **kwargs: Any) -> Self:
        """Return a copy with the given keys replaced.

        Unknown keys are rejected; put library specific keys in `extras`.
        """
        known = {f.name for f in fields(self)}
        unknown = set(kwargs) - known
        if unknown:
            raise InvalidArgument(f'Unknown spec keys: {sorted(unknown)}')
        return replace(self, **kwargs)

    def merge(self, other: 'DbSpec | Mapping[str, Any] | None') -> Self:
        """Merge a spec or a mapping of keys onto this spec.

        A `DbSpec` argument contributes only the keys that differ from the
        defaults, so merging a partial spec does not reset the rest. A
        datasource always travels with its connection, even a None one.
        Mappings replace exactly the keys they name, defaults included.
        """
        if other is None:
            return self
        if isinstance(other, DbSpec):
            spec = other
            other = {k: v for k, v in spec.items() if v != getattr(DEFAULT_SPEC, k)}
            if spec.datasource is not None:
                other['connection'] = spec.connection
        return self.assoc(**dict(other))

    def items(self):
        return ((f.name, getattr(self, f.name)) for f in fields(self))

    def as_dict(self) -> dict[str, Any]:
        return dict(self.items())


DEFAULT_SPEC = DbSpec()


def _spec_or_current(spec: Any) -> Any:
    if spec is not None:
        return spec
    from dbutil.context import current_spec
    return current_spec()


def _read_only_flag(spec: Any) -> bool:
    if isinstance(spec, DbSpec):
        return bool(spec.read_only)
    if isinstance(spec, Mapping):
        return bool(spec.get('read_only', False))
    raise InvalidArgument(f'Expected DbSpec or mapping, got {type(spec).__name__}')


def assoc_datasource(spec: DbSpec, ds: Any) -> DbSpec:
    """Add a datasource to the spec, clearing any bound connection.

    `ds` is an Engine or a no-arg callable returning one.
    """
    if not (isinstance(ds, sa.Engine) or callable(ds)):
        raise InvalidArgument(f'Expected Engine or callable, got {type(ds).__name__}')
    return spec.assoc(datasource=ds, connection=None)


def assoc_readonly(spec: DbSpec, flag: bool = True) -> DbSpec:
    """Set the read-only flag on the spec.
    """
    return spec.assoc(read_only=flag)


def is_read_only(spec: DbSpec | Mapping | None = None) -> bool:
    """Return True if the spec (current spec by default) is read-only.
    """
    return _read_only_flag(_spec_or_current(spec))


def verify_writable(spec: DbSpec | Mapping | None = None) -> bool:
    """Return True if the spec is writable, raise ReadOnlyError otherwise.

    Advisory: callers about to write are expected to call this first. It
    never touches the database.
    """
    spec = _spec_or_current(spec)
    if _read_only_flag(spec):
        raise ReadOnlyError(f'Spec is in READ-ONLY mode: {spec!r}')
    return True


def config_from_datasource(ds: Any) -> DbSpec:
    """Minimal spec fragment for a datasource.
    """
    return assoc_datasource(DEFAULT_SPEC, ds)


def config_from_connection(conn: Any) -> DbSpec:
    """Minimal spec fragment for an open connection.
    """
    if conn is None:
        raise InvalidArgument('connection must not be None')
    return DEFAULT_SPEC.assoc(connection=conn)


def make_dbspec(handle: Any) -> DbSpec:
    """Build a spec from an Engine or a connection.
    """
    if isinstance(handle, sa.Engine):
        return config_from_datasource(handle)
    if isinstance(handle, sa.Connection) or hasattr(handle, 'cursor'):
        return config_from_connection(handle)
    raise InvalidArgument(f'Cannot build a spec from {type(handle).__name__}')
