import dbutil
from dbutil import DbSpec, make_dbspec, with_connection


def test_make_connection(sqlite_url):
    conn = dbutil.make_connection(sqlite_url)
    try:
        assert conn.exec_driver_sql('SELECT COUNT(*) FROM test_table').scalar() == 3
    finally:
        conn.close()


def test_make_dbspec_from_engine(sqlite_engine):
    spec = make_dbspec(sqlite_engine)
    assert isinstance(spec, DbSpec)
    with with_connection(spec, show_sql=False):
        rows = dbutil.select('SELECT name FROM test_table ORDER BY id')
    assert rows[0].get('name') == 'Alice'


def test_make_dbspec_from_connection(sqlite_conn):
    spec = make_dbspec(sqlite_conn)
    with with_connection(spec, show_sql=False):
        assert len(dbutil.select('SELECT id FROM test_table')) == 3
    assert not sqlite_conn.closed
