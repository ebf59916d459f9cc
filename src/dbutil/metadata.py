"""
Database metadata and introspection.

Enumerations return lists of Rows whose labels follow the JDBC metadata
column names (TABLE_CAT, TABLE_SCHEM, TABLE_NAME, ...). With the default
converter the Row keys read 'table-cat', 'table-schem', 'table-name'.

Every function accepts a SQLAlchemy Connection or Engine. Name patterns
use SQL LIKE syntax: '%' matches any run of characters, '_' one
character, and a backslash escapes either. Catalog arguments: None does
not narrow the search, '' matches objects without a catalog (there are
none), any other value must equal the connected catalog.
"""
import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import sqlalchemy as sa
from dbutil.cursor import RecordCursor, row_seq
from dbutil.exceptions import InvalidArgument
from dbutil.identifiers import to_host_identifier
from dbutil.options import DbSpec
from dbutil.row import Row
from dbutil.strategy import get_db_strategy
from sqlalchemy.engine import Inspector

__all__ = [
    'dbmeta',
    'get_dbmeta',
    'get_catalogs',
    'get_schemas',
    'get_tables',
    'table_names',
    'get_columns',
    'get_column_privileges',
    'get_crossref',
    'TABLE_TYPES',
]

logger = logging.getLogger(__name__)

TABLE_TYPES = ('TABLE', 'VIEW')

TABLE_LABELS = ['TABLE_CAT', 'TABLE_SCHEM', 'TABLE_NAME', 'TABLE_TYPE', 'REMARKS']

COLUMN_LABELS = [
    'TABLE_CAT', 'TABLE_SCHEM', 'TABLE_NAME', 'COLUMN_NAME', 'TYPE_NAME',
    'COLUMN_SIZE', 'DECIMAL_DIGITS', 'NULLABLE', 'REMARKS', 'COLUMN_DEF',
    'ORDINAL_POSITION', 'IS_NULLABLE', 'IS_AUTOINCREMENT',
    ]

PRIVILEGE_LABELS = [
    'TABLE_CAT', 'TABLE_SCHEM', 'TABLE_NAME', 'COLUMN_NAME', 'GRANTOR',
    'GRANTEE', 'PRIVILEGE', 'IS_GRANTABLE',
    ]

CROSSREF_LABELS = [
    'PKTABLE_CAT', 'PKTABLE_SCHEM', 'PKTABLE_NAME', 'PKCOLUMN_NAME',
    'FKTABLE_CAT', 'FKTABLE_SCHEM', 'FKTABLE_NAME', 'FKCOLUMN_NAME',
    'KEY_SEQ', 'UPDATE_RULE', 'DELETE_RULE', 'FK_NAME', 'PK_NAME',
    'DEFERRABILITY',
    ]


@contextmanager
def _connected(bind: Any) -> Iterator[sa.Connection]:
    if isinstance(bind, sa.Connection):
        yield bind
    elif isinstance(bind, sa.Engine):
        with bind.connect() as conn:
            yield conn
    else:
        raise InvalidArgument(f'Expected SQLAlchemy Connection or Engine, got {type(bind).__name__}')


def _rows(labels: Sequence[str], records: Iterable[Sequence[Any]],
          spec: DbSpec | None = None) -> list[Row]:
    return list(row_seq(RecordCursor(labels, records), spec))


def like_to_regex(pattern: str | None) -> re.Pattern | None:
    """Compile a SQL LIKE pattern; None matches everything.

    >>> like_to_regex('TEST\\_%').fullmatch('TEST_TABLE') is not None
    True
    """
    if pattern is None:
        return None
    out, chars = [], iter(pattern)
    for ch in chars:
        if ch == '\\':
            out.append(re.escape(next(chars, '\\')))
        elif ch == '%':
            out.append('.*')
        elif ch == '_':
            out.append('.')
        else:
            out.append(re.escape(ch))
    return re.compile(''.join(out), re.DOTALL)


def _matches(regex: re.Pattern | None, name: str | None) -> bool:
    return regex is None or (name is not None and regex.fullmatch(name) is not None)


def _catalog_matches(conn: sa.Connection, catalog: str | None) -> tuple[bool, str]:
    current = get_db_strategy(conn).current_catalog(conn)
    return (catalog is None or catalog == current), current


def _version_string(info: tuple | None) -> str | None:
    if not info:
        return None
    return '.'.join(str(part) for part in info)


def dbmeta(conn: Any, spec: DbSpec | None = None) -> dict[Any, Any]:
    """Return a dict of database metadata.

    Keys are converted with `to_host_identifier`, e.g. 'product-name'.
    """
    with _connected(conn) as cn:
        dialect = cn.dialect
        url = cn.engine.url
        dbapi = dialect.loaded_dbapi
        version = dialect.server_version_info or ()
        inspector = sa.inspect(cn)
        info = {
            # basic information
            'PRODUCT_NAME': dialect.name,
            'PRODUCT_VERSION': _version_string(version),
            'DRIVER_NAME': dialect.driver,
            'DRIVER_VERSION': getattr(dbapi, '__version__', None) or getattr(dbapi, 'sqlite_version', None),
            'URL': url.render_as_string(hide_password=True),
            'USERNAME': url.username,
            'DB_MAJOR_VERSION': version[0] if len(version) > 0 else None,
            'DB_MINOR_VERSION': version[1] if len(version) > 1 else None,
            # terms and quotes
            'IDENT_QUOTE_STRING': dialect.identifier_preparer.initial_quote,
            'CATALOG_TERM': 'database',
            'SCHEMA_TERM': 'schema',
            'PARAMSTYLE': dialect.paramstyle,
            'CATALOG': get_db_strategy(cn).current_catalog(cn),
            'DEFAULT_SCHEMA': inspector.default_schema_name,
            # limits and features
            'MAX_IDENTIFIER_LENGTH': dialect.max_identifier_length,
            'SUPPORTS_TRANSACTIONS': True,
            'SUPPORTS_SCHEMAS': dialect.name != 'sqlite',
            'SUPPORTS_SEQUENCES': bool(dialect.supports_sequences),
            'SUPPORTS_ALTER': bool(dialect.supports_alter),
            'SUPPORTS_NATIVE_BOOLEAN': bool(dialect.supports_native_boolean),
            'SUPPORTS_MULTIVALUES_INSERT': bool(dialect.supports_multivalues_insert),
            'TABLE_TYPES': list(TABLE_TYPES),
        }
    return {to_host_identifier(k, spec): v for k, v in info.items()}


def get_dbmeta(conn: Any) -> Inspector:
    """Return the SQLAlchemy Inspector for the connection.

    Not to be confused with `dbmeta`, which returns a dict.
    """
    return sa.inspect(conn)


def get_catalogs(conn: Any, spec: DbSpec | None = None) -> list[Row]:
    """Return the catalogs in the database.

    Columns: TABLE_CAT.
    """
    with _connected(conn) as cn:
        catalogs = get_db_strategy(cn).get_catalogs(cn)
    return _rows(['TABLE_CAT'], ([name] for name in catalogs), spec)


def get_schemas(conn: Any, spec: DbSpec | None = None) -> list[Row]:
    """Return the schemas available in the database, ordered by name.

    Columns: TABLE_SCHEM, TABLE_CATALOG, IS_DEFAULT.
    """
    with _connected(conn) as cn:
        inspector = sa.inspect(cn)
        catalog = get_db_strategy(cn).current_catalog(cn)
        default = inspector.default_schema_name
        records = [[name, catalog, name == default]
                   for name in sorted(inspector.get_schema_names())]
    return _rows(['TABLE_SCHEM', 'TABLE_CATALOG', 'IS_DEFAULT'], records, spec)


def _table_comment(inspector: Inspector, table: str, schema: str) -> str | None:
    try:
        return inspector.get_table_comment(table, schema=schema).get('text')
    except NotImplementedError:
        return None


def _iter_tables(inspector: Inspector, schema_pattern: str | None,
                 table_pattern: str | None,
                 types: Iterable[str] | None) -> Iterator[tuple[str, str, str]]:
    """Yield (schema, table, type) for matching tables and views."""
    if types is None:
        types = TABLE_TYPES
    elif isinstance(types, str):
        types = [types]
    wanted = set(types)
    schema_re = like_to_regex(schema_pattern)
    table_re = like_to_regex(table_pattern)
    for schema in inspector.get_schema_names():
        if not _matches(schema_re, schema):
            continue
        if 'TABLE' in wanted:
            for name in inspector.get_table_names(schema=schema):
                if _matches(table_re, name):
                    yield schema, name, 'TABLE'
        if 'VIEW' in wanted:
            for name in inspector.get_view_names(schema=schema):
                if _matches(table_re, name):
                    yield schema, name, 'VIEW'


def get_tables(conn: Any, catalog: str | None = None,
               schema_pattern: str | None = None,
               table_pattern: str | None = None,
               types: Iterable[str] | None = ('TABLE',),
               spec: DbSpec | None = None) -> list[Row]:
    """Return table descriptions, ordered by type, schema and name.

    Columns: TABLE_CAT, TABLE_SCHEM, TABLE_NAME, TABLE_TYPE, REMARKS.

    Args:
        conn: SQLAlchemy Connection or Engine
        catalog: catalog name, None to ignore
        schema_pattern: LIKE pattern on schema names, None for all
        table_pattern: LIKE pattern on table names, None for all
        types: table types to include, from `TABLE_TYPES`; None for all
        spec: spec whose `to_host` converts the labels
    """
    with _connected(conn) as cn:
        ok, current = _catalog_matches(cn, catalog)
        if not ok:
            return []
        inspector = sa.inspect(cn)
        found = sorted(_iter_tables(inspector, schema_pattern, table_pattern, types),
                       key=lambda t: (t[2], t[0], t[1]))
        records = [[current, schema, name, kind, _table_comment(inspector, name, schema)]
                   for schema, name, kind in found]
    logger.debug(f'Found {len(records)} tables')
    return _rows(TABLE_LABELS, records, spec)


def table_names(rows: Iterable[Row], spec: DbSpec | None = None) -> list[Any]:
    """Return table names from rows returned by `get_tables`."""
    key = to_host_identifier('TABLE_NAME', spec)
    return [row.get(key) for row in rows]


def _type_name(type_: Any, dialect: Any) -> str | None:
    try:
        return type_.compile(dialect=dialect)
    except sa.exc.CompileError:
        return None


def _yes_no(flag: Any) -> str:
    if flag is True:
        return 'YES'
    if flag is False:
        return 'NO'
    return ''


def get_columns(conn: Any, catalog: str | None = None,
                schema_pattern: str | None = None,
                table_pattern: str | None = None,
                column_pattern: str | None = None,
                spec: DbSpec | None = None) -> list[Row]:
    """Return column descriptions, ordered by schema, table and position.

    Columns: TABLE_CAT, TABLE_SCHEM, TABLE_NAME, COLUMN_NAME, TYPE_NAME,
    COLUMN_SIZE, DECIMAL_DIGITS, NULLABLE (1 or 0), REMARKS, COLUMN_DEF,
    ORDINAL_POSITION (from 1), IS_NULLABLE ('YES'/'NO'),
    IS_AUTOINCREMENT ('YES', 'NO' or '' when unknown).
    """
    column_re = like_to_regex(column_pattern)
    records = []
    with _connected(conn) as cn:
        ok, current = _catalog_matches(cn, catalog)
        if not ok:
            return []
        inspector = sa.inspect(cn)
        tables = sorted(_iter_tables(inspector, schema_pattern, table_pattern, None),
                        key=lambda t: (t[0], t[1]))
        for schema, table, _ in tables:
            columns = inspector.get_columns(table, schema=schema)
            for position, col in enumerate(columns, 1):
                if not _matches(column_re, col['name']):
                    continue
                type_ = col['type']
                records.append([
                    current, schema, table, col['name'],
                    _type_name(type_, cn.dialect),
                    getattr(type_, 'length', None) or getattr(type_, 'precision', None),
                    getattr(type_, 'scale', None),
                    1 if col.get('nullable', True) else 0,
                    col.get('comment'),
                    col.get('default'),
                    position,
                    _yes_no(bool(col.get('nullable', True))),
                    _yes_no(col.get('autoincrement')),
                    ])
    return _rows(COLUMN_LABELS, records, spec)


def get_column_privileges(conn: Any, catalog: str | None = None,
                          schema: str | None = None, table: str | None = None,
                          column_pattern: str | None = None,
                          spec: DbSpec | None = None) -> list[Row]:
    """Return access rights for table columns, ordered by column and privilege.

    Columns: TABLE_CAT, TABLE_SCHEM, TABLE_NAME, COLUMN_NAME, GRANTOR,
    GRANTEE, PRIVILEGE, IS_GRANTABLE. Always empty on SQLite.
    """
    with _connected(conn) as cn:
        records = get_db_strategy(cn).get_column_privileges(
            cn, catalog, schema, table, column_pattern)
    return _rows(PRIVILEGE_LABELS, records, spec)


def _deferrability(options: dict) -> str:
    if not options.get('deferrable'):
        return 'NOT DEFERRABLE'
    if str(options.get('initially', '')).upper() == 'DEFERRED':
        return 'INITIALLY DEFERRED'
    return 'INITIALLY IMMEDIATE'


def get_crossref(conn: Any, parent_table: str, foreign_table: str,
                 parent_catalog: str | None = None,
                 parent_schema: str | None = None,
                 foreign_catalog: str | None = None,
                 foreign_schema: str | None = None,
                 spec: DbSpec | None = None) -> list[Row]:
    """Return the foreign key columns of `foreign_table` referencing `parent_table`.

    Ordered by foreign key name and KEY_SEQ (1 for the first column of a
    key). UPDATE_RULE and DELETE_RULE are SQL actions such as 'CASCADE',
    'NO ACTION' when the database reports none. Empty when either table
    does not exist.
    """
    with _connected(conn) as cn:
        parent_ok, current = _catalog_matches(cn, parent_catalog)
        foreign_ok, _ = _catalog_matches(cn, foreign_catalog)
        if not (parent_ok and foreign_ok):
            return []
        inspector = sa.inspect(cn)
        if not (inspector.has_table(parent_table, schema=parent_schema)
                and inspector.has_table(foreign_table, schema=foreign_schema)):
            logger.debug(f'No crossref: {parent_table} or {foreign_table} not found')
            return []
        default_schema = inspector.default_schema_name
        fk_schema = foreign_schema or default_schema
        pk_name = inspector.get_pk_constraint(parent_table, schema=parent_schema).get('name')
        records = []
        for fk in inspector.get_foreign_keys(foreign_table, schema=foreign_schema):
            pk_schema = fk.get('referred_schema') or default_schema
            if fk['referred_table'] != parent_table:
                continue
            if parent_schema is not None and pk_schema != parent_schema:
                continue
            options = fk.get('options') or {}
            pairs = zip(fk['referred_columns'], fk['constrained_columns'])
            for seq, (pk_col, fk_col) in enumerate(pairs, 1):
                records.append([
                    current, pk_schema, parent_table, pk_col,
                    current, fk_schema, foreign_table, fk_col,
                    seq,
                    (options.get('onupdate') or 'NO ACTION').upper(),
                    (options.get('ondelete') or 'NO ACTION').upper(),
                    fk.get('name'), pk_name, _deferrability(options),
                    ])
    records.sort(key=lambda r: (r[11] or '', r[8]))
    return _rows(CROSSREF_LABELS, records, spec)
