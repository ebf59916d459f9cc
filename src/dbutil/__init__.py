"""
Building blocks for database libraries on top of DB-API drivers.

- Rows: ordered records addressable by position or converted column name
- Identifier conversion between Python and database naming conventions
- A database spec (`DbSpec`) bound per context with `use_spec` and
  `with_connection`
- Datasource/connection helpers and metadata introspection
"""
__version__ = '0.1.0'

from dbutil.connection import create_url, dispose_all_datasources
from dbutil.connection import get_datasource_connection, make_connection
from dbutil.connection import make_datasource
from dbutil.context import current_spec, use_spec, with_connection
from dbutil.cursor import DbApiCursor, RecordCursor, TabularCursor
from dbutil.cursor import colvalue_seq, row_seq
from dbutil.data import rows_to_dataframe, rows_to_dicts
from dbutil.exceptions import CursorError, DatabaseError, InvalidArgument
from dbutil.exceptions import ReadOnlyError
from dbutil.identifiers import join_db_identifiers, to_db_identifier
from dbutil.identifiers import to_host_identifier
from dbutil.metadata import dbmeta, get_catalogs, get_column_privileges
from dbutil.metadata import get_columns, get_crossref, get_dbmeta
from dbutil.metadata import get_schemas, get_tables, table_names
from dbutil.naming import Ident
from dbutil.options import DEFAULT_SPEC, DbSpec, assoc_datasource
from dbutil.options import assoc_readonly, config_from_connection
from dbutil.options import config_from_datasource, is_read_only, make_dbspec
from dbutil.options import verify_writable
from dbutil.query import execute, iter_select, select
from dbutil.row import Row, RowFactory, is_row, make_row

__all__ = [
    'Row',
    'RowFactory',
    'make_row',
    'is_row',
    'row_seq',
    'colvalue_seq',
    'TabularCursor',
    'DbApiCursor',
    'RecordCursor',
    'Ident',
    'to_db_identifier',
    'join_db_identifiers',
    'to_host_identifier',
    'DbSpec',
    'DEFAULT_SPEC',
    'assoc_datasource',
    'assoc_readonly',
    'is_read_only',
    'verify_writable',
    'config_from_datasource',
    'config_from_connection',
    'make_dbspec',
    'current_spec',
    'use_spec',
    'with_connection',
    'create_url',
    'make_datasource',
    'make_connection',
    'get_datasource_connection',
    'dispose_all_datasources',
    'iter_select',
    'select',
    'execute',
    'dbmeta',
    'get_dbmeta',
    'get_catalogs',
    'get_schemas',
    'get_tables',
    'table_names',
    'get_columns',
    'get_column_privileges',
    'get_crossref',
    'rows_to_dataframe',
    'rows_to_dicts',
    'DatabaseError',
    'InvalidArgument',
    'ReadOnlyError',
    'CursorError',
]
