"""
Datasource and connection construction with SQLAlchemy.

A datasource here is a SQLAlchemy Engine with `NullPool`: every
`connect()` opens a fresh driver connection and closing it really closes
it. That is fine for tests and tools; production code should hand in its
own pooled Engine through the spec instead.
"""
import atexit
import logging
import threading
from collections.abc import Callable
from typing import Any

import sqlalchemy as sa
from dbutil.exceptions import InvalidArgument
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

__all__ = [
    'create_url',
    'make_datasource',
    'make_connection',
    'get_datasource_connection',
    'dispose_all_datasources',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url(drivername: str, database: str | None = None,
               hostname: str | None = None, username: str | None = None,
               password: str | None = None, port: int | None = None,
               timeout: int | None = None,
               url_creator: Callable[..., sa.URL] = sa.URL.create) -> sa.URL:
    """Build a SQLAlchemy URL for `sqlite` or `postgresql`.
    """
    if drivername == 'sqlite':
        return url_creator(
            drivername='sqlite',
            database=database
        )

    elif drivername == 'postgresql':
        query = {}
        if timeout:
            query['connect_timeout'] = str(timeout)

        return url_creator(
            drivername='postgresql+psycopg',
            username=username,
            password=password,
            host=hostname,
            port=port,
            database=database,
            query=query
        )

    raise InvalidArgument(f'Unsupported database type: {drivername}')


def _with_credentials(url: str | sa.URL, username: str | None,
                      password: str | None) -> sa.URL:
    url = sa.make_url(url)
    if username is not None:
        url = url.set(username=username)
    if password is not None:
        url = url.set(password=password)
    return url


def make_datasource(url: str | sa.URL, username: str | None = None,
                    password: str | None = None,
                    engine_factory: Callable[..., Engine] = sa.create_engine,
                    **kwargs: Any) -> Engine:
    """Get or create a non-pooling Engine for the URL.

    Engines are shared per URL and engine options, and disposed at exit.
    """
    url = _with_credentials(url, username, password)
    key = f'{url.render_as_string(hide_password=False)}_{sorted(kwargs.items())}'

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {url.get_backend_name()}')
            return _engine_registry[key]

        engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {url.get_backend_name()}')

        return engine


def make_connection(url: str | sa.URL, username: str | None = None,
                    password: str | None = None) -> sa.Connection:
    """Open a connection for the URL.

    The driver must be importable; nothing is loaded on demand.
    """
    return get_datasource_connection(make_datasource(url, username, password))


def get_datasource_connection(ds: Engine) -> sa.Connection:
    """Obtain a connection from a datasource."""
    return ds.connect()


def dispose_all_datasources() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All datasources disposed')


atexit.register(dispose_all_datasources)
