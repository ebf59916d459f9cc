"""
Metadata strategy factory for dialect-specific lookups.
"""
from functools import lru_cache

from dbutil.strategy.base import _STRATEGY_REGISTRY
from dbutil.strategy.base import MetadataStrategy as MetadataStrategy
from dbutil.strategy.base import register_strategy as register_strategy
from dbutil.strategy.postgres import PostgresStrategy as PostgresStrategy
from dbutil.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def _validate_dialect(dialect: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if dialect not in _STRATEGY_REGISTRY:
        available = list(_STRATEGY_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> MetadataStrategy:
    """Get cached strategy instance for a dialect name."""
    _validate_dialect(dialect)
    return _STRATEGY_REGISTRY[dialect]()


def get_db_strategy(conn) -> MetadataStrategy:
    """Get strategy for a SQLAlchemy connection or engine."""
    return get_strategy(conn.dialect.name)


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_STRATEGY_REGISTRY.keys())
