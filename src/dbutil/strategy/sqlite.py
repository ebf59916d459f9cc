"""
SQLite-specific metadata lookups.

SQLite has no privilege system and names its catalogs after the attached
databases ('main', 'temp' and any ATTACHed file).
"""
import logging

import sqlalchemy as sa
from dbutil.strategy.base import MetadataStrategy, register_strategy

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(MetadataStrategy):
    """SQLite metadata lookups.
    """

    def current_catalog(self, conn: sa.Connection) -> str:
        return 'main'

    def get_catalogs(self, conn: sa.Connection) -> list[str]:
        # PRAGMA database_list rows are (seq, name, file)
        return sorted(row[1] for row in self._select_raw(conn, 'PRAGMA database_list'))

    def get_column_privileges(self, conn: sa.Connection, catalog: str | None,
                              schema: str | None, table: str | None,
                              column_pattern: str | None) -> list[tuple]:
        logger.debug('SQLite has no column privileges')
        return []
