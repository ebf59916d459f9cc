"""
Binding of the current database spec.

The current spec lives in a ContextVar so each thread and asyncio task
sees its own binding. Bindings nest with stack discipline: leaving a
`use_spec` or `with_connection` block always restores the previous spec.
"""
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import sqlalchemy as sa
from dbutil.exceptions import InvalidArgument
from dbutil.options import DEFAULT_SPEC, DbSpec

__all__ = ['current_spec', 'use_spec', 'with_connection', 'resolve_datasource']

logger = logging.getLogger(__name__)

_current_spec: ContextVar[DbSpec] = ContextVar('dbutil_spec', default=DEFAULT_SPEC)


def current_spec() -> DbSpec:
    """Return the spec bound for the current context."""
    return _current_spec.get()


@contextmanager
def _bind(spec: DbSpec) -> Iterator[DbSpec]:
    token = _current_spec.set(spec)
    try:
        yield spec
    finally:
        _current_spec.reset(token)


@contextmanager
def use_spec(spec: DbSpec | Mapping[str, Any] | None = None,
             **overrides: Any) -> Iterator[DbSpec]:
    """Bind `spec` merged onto the current spec for the duration of the block.

    A `DbSpec` argument only contributes keys that differ from the
    defaults, so it cannot reset a key to its default value. Use a mapping
    or keyword overrides for that, e.g. `use_spec(read_only=False)`.
    """
    with _bind(current_spec().merge(spec).merge(overrides)) as bound:
        yield bound


def resolve_datasource(ds: Any) -> sa.Engine:
    """Return the Engine for a datasource value (Engine or no-arg callable).
    """
    if isinstance(ds, sa.Engine):
        return ds
    if callable(ds):
        return ds()
    raise InvalidArgument(f'Not a datasource: {type(ds).__name__}')


@contextmanager
def with_connection(spec: DbSpec | Mapping[str, Any] | None = None,
                    **overrides: Any) -> Iterator[DbSpec]:
    """Bind a spec that is guaranteed to carry a connection.

    An existing connection is used as is. Otherwise a connection is taken
    from the datasource, bound for the block and closed on exit.
    """
    merged = current_spec().merge(spec).merge(overrides)
    if merged.connection is not None:
        with _bind(merged) as bound:
            yield bound
        return

    if merged.datasource is None:
        raise InvalidArgument('Spec has neither a connection nor a datasource')

    conn = resolve_datasource(merged.datasource).connect()
    logger.debug('Opened connection from datasource')
    try:
        with _bind(merged.assoc(connection=conn)) as bound:
            yield bound
    finally:
        conn.close()
        logger.debug('Closed datasource connection')
