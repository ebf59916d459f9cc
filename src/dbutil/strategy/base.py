"""
Base strategy interface for dialect-specific metadata lookups.

Most introspection goes through the SQLAlchemy Inspector. The few
lookups it does not cover (catalog listing, column privileges) are
answered by a strategy registered per dialect name.
"""
from abc import ABC, abstractmethod
from typing import Any

import sqlalchemy as sa

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['MetadataStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(MetadataStrategy):
            ...
    """
    def decorator(cls: type['MetadataStrategy']) -> type['MetadataStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class MetadataStrategy(ABC):
    """Base class for dialect-specific metadata lookups.
    """

    def _select_raw(self, conn: sa.Connection, sql: str,
                    params: dict[str, Any] | tuple | None = None) -> list[tuple]:
        """Execute SQL with the driver's paramstyle and return plain tuples.
        """
        result = conn.exec_driver_sql(sql, params or ())
        return [tuple(row) for row in result]

    @abstractmethod
    def current_catalog(self, conn: sa.Connection) -> str:
        """Return the catalog the connection is attached to.

        Args:
            conn: SQLAlchemy connection
        """

    @abstractmethod
    def get_catalogs(self, conn: sa.Connection) -> list[str]:
        """Return catalog names, ordered by name.

        Args:
            conn: SQLAlchemy connection
        """

    @abstractmethod
    def get_column_privileges(self, conn: sa.Connection, catalog: str | None,
                              schema: str | None, table: str | None,
                              column_pattern: str | None) -> list[tuple]:
        """Return column privilege records.

        Each record is (catalog, schema, table, column, grantor, grantee,
        privilege, is_grantable), ordered by column and privilege.

        Args:
            conn: SQLAlchemy connection
            catalog: catalog name, None to ignore
            schema: schema name, None to ignore
            table: table name, None to ignore
            column_pattern: LIKE pattern on column names, None for all
        """
