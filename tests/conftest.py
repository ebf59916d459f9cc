
import dbutil
import pytest
from dbutil.connection import dispose_all_datasources



class FakeCursor:
    """Scripted `TabularCursor` for row production tests.

    `fail_on` makes the n-th call to advance() raise `error`.
    """

    def __init__(self, labels, records, fail_on=None, error=None):
        self.labels = list(labels)
        self.records = list(records)
        self.fail_on = fail_on
        self.error = error or RuntimeError('driver failure')
        self.advance_calls = 0
        self.column_count_calls = 0
        self._index = -1

    def column_count(self):
        self.column_count_calls += 1
        return len(self.labels)

    def column_label(self, position):
        return self.labels[position - 1]

    def advance(self):
        self.advance_calls += 1
        if self.fail_on is not None and self.advance_calls == self.fail_on:
            raise self.error
        if self._index + 1 >= len(self.records):
            self._index = len(self.records)
            return False
        self._index += 1
        return True

    def value(self, key):
        record = self.records[self._index]
        if isinstance(key, str):
            return record[self.labels.index(key)]
        return record[key - 1]


@pytest.fixture
def fake_cursor():
    """Factory for scripted tabular cursors.

    Example usage:
        def test_rows(fake_cursor):
            cursor = fake_cursor(['ID', 'NAME'], [(1, 'a'), (2, 'b')])
    """
    def factory(labels, records, fail_on=None, error=None):
        return FakeCursor(labels, records, fail_on=fail_on, error=error)

    return factory


@pytest.fixture(autouse=True)
def clear_datasources():
    """Dispose cached engines before and after each test to ensure test isolation."""
    dispose_all_datasources()
    yield
    dispose_all_datasources()


@pytest.fixture
def sqlite_url(tmp_path):
    """URL of a file-based SQLite database seeded with test_table."""
    url = f'sqlite:///{tmp_path / "test.db"}'
    engine = dbutil.make_datasource(url)
    with engine.connect() as conn:
        raw = conn.connection
        cursor = raw.cursor()
        cursor.executescript("""
        CREATE TABLE test_table (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            value INTEGER NOT NULL
        );
        INSERT INTO test_table (name, value) VALUES
            ('Alice', 10), ('Bob', 20), ('Charlie', 30);
        """)
        cursor.close()
        raw.commit()
    return url


@pytest.fixture
def sqlite_engine(sqlite_url):
    """Non-pooling datasource for the seeded SQLite database."""
    return dbutil.make_datasource(sqlite_url)


@pytest.fixture
def sqlite_conn(sqlite_engine):
    """Open SQLAlchemy connection to the seeded SQLite database."""
    conn = sqlite_engine.connect()
    yield conn
    conn.close()
