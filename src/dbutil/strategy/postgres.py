"""
PostgreSQL-specific metadata lookups.
"""
import logging

import sqlalchemy as sa
from dbutil.strategy.base import MetadataStrategy, register_strategy

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(MetadataStrategy):
    """PostgreSQL metadata lookups.
    """

    def current_catalog(self, conn: sa.Connection) -> str:
        return self._select_raw(conn, 'SELECT current_database()')[0][0]

    def get_catalogs(self, conn: sa.Connection) -> list[str]:
        sql = """
SELECT datname
FROM pg_catalog.pg_database
WHERE datallowconn = true
ORDER BY datname
"""
        return [row[0] for row in self._select_raw(conn, sql)]

    def get_column_privileges(self, conn: sa.Connection, catalog: str | None,
                              schema: str | None, table: str | None,
                              column_pattern: str | None) -> list[tuple]:
        sql = """
SELECT table_catalog, table_schema, table_name, column_name,
       grantor, grantee, privilege_type, is_grantable
FROM information_schema.column_privileges
WHERE (%(catalog)s::text IS NULL OR table_catalog = %(catalog)s)
  AND (%(schema)s::text IS NULL OR table_schema = %(schema)s)
  AND (%(table)s::text IS NULL OR table_name = %(table)s)
  AND column_name LIKE %(column_pattern)s
ORDER BY column_name, privilege_type
"""
        params = {
            'catalog': catalog,
            'schema': schema,
            'table': table,
            'column_pattern': column_pattern or '%',
        }
        return self._select_raw(conn, sql, params)
