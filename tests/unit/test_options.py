import pytest
import sqlalchemy as sa
from dbutil import DEFAULT_SPEC, DbSpec, InvalidArgument, ReadOnlyError
from dbutil import assoc_datasource, assoc_readonly, config_from_connection
from dbutil import config_from_datasource, is_read_only, make_dbspec, use_spec
from dbutil import verify_writable
from dbutil.naming import default_to_db, default_to_host
from dbutil.options import log_sql


def test_init_defaults():
    """Test default initialization"""
    spec = DbSpec()

    assert spec.datasource is None
    assert spec.connection is None
    assert spec.dbmetadata == {}
    assert spec.catalog is None
    assert spec.schema is None
    assert spec.read_only is False
    assert spec.show_sql is True
    assert spec.show_sql_fn is log_sql
    assert spec.to_db is default_to_db
    assert spec.to_host is default_to_host
    assert spec.fetch_size == 1000
    assert spec.query_timeout == 0
    assert spec.extras == {}


@pytest.mark.parametrize('kwargs', [
    {'fetch_size': -1},
    {'query_timeout': -5},
    {'to_db': 'not callable'},
    {'to_host': None},
    {'show_sql_fn': 3},
])
def test_validation(kwargs):
    """Test validation rules"""
    with pytest.raises(InvalidArgument):
        DbSpec(**kwargs)


def test_assoc_returns_copy():
    spec = DEFAULT_SPEC.assoc(fetch_size=10, schema='public')
    assert spec.fetch_size == 10
    assert spec.schema == 'public'
    assert DEFAULT_SPEC.fetch_size == 1000


def test_assoc_rejects_unknown_keys():
    """Library specific keys belong in extras"""
    with pytest.raises(InvalidArgument):
        DEFAULT_SPEC.assoc(pool_name='x')
    spec = DEFAULT_SPEC.assoc(extras={'com.foo.pool-name': 'x'})
    assert spec.extras['com.foo.pool-name'] == 'x'


def test_merge_partial_spec_keeps_other_keys():
    """Merging a spec only carries its non-default keys"""
    base = DbSpec(fetch_size=5, read_only=True)
    merged = base.merge(DbSpec(schema='s'))
    assert merged.fetch_size == 5
    assert merged.read_only is True
    assert merged.schema == 's'


def test_merge_mapping_can_reset_keys():
    base = DbSpec(read_only=True)
    assert base.merge({'read_only': False}).read_only is False


def test_merge_datasource_clears_connection(mocker):
    """A merged datasource replaces any connection already bound"""
    engine = mocker.MagicMock(spec=sa.Engine)
    base = DbSpec(connection=object())
    merged = base.merge(config_from_datasource(engine))
    assert merged.datasource is engine
    assert merged.connection is None


def test_verify_writable():
    """Read-only specs refuse writes, others pass"""
    assert verify_writable(DbSpec()) is True
    assert verify_writable({'read_only': False}) is True
    assert verify_writable({}) is True
    with pytest.raises(ReadOnlyError):
        verify_writable(DbSpec(read_only=True))
    with pytest.raises(ReadOnlyError):
        verify_writable({'read_only': True})


def test_verify_writable_does_not_mutate():
    spec = {'read_only': True}
    with pytest.raises(ReadOnlyError):
        verify_writable(spec)
    assert spec == {'read_only': True}


def test_verify_writable_uses_current_spec():
    assert verify_writable() is True
    with use_spec(read_only=True):
        with pytest.raises(ReadOnlyError):
            verify_writable()
    assert verify_writable() is True


def test_verify_writable_rejects_other_types():
    with pytest.raises(InvalidArgument):
        verify_writable(['read_only'])


def test_is_read_only():
    assert is_read_only(DbSpec()) is False
    assert is_read_only({'read_only': 1}) is True
    assert is_read_only(assoc_readonly(DEFAULT_SPEC)) is True
    assert is_read_only(assoc_readonly(DEFAULT_SPEC, False)) is False


def test_assoc_datasource(mocker):
    """Datasource may be an Engine or a factory; connection is cleared"""
    engine = mocker.MagicMock(spec=sa.Engine)
    spec = assoc_datasource(DbSpec(connection='conn'), engine)
    assert spec.datasource is engine
    assert spec.connection is None

    factory = assoc_datasource(DEFAULT_SPEC, lambda: engine)
    assert callable(factory.datasource)

    with pytest.raises(InvalidArgument):
        assoc_datasource(DEFAULT_SPEC, 'sqlite://')


def test_config_factories(mocker):
    """Explicit factories for datasources and connections"""
    engine = mocker.MagicMock(spec=sa.Engine)
    conn = mocker.MagicMock(spec=sa.Connection)

    assert config_from_datasource(engine).datasource is engine
    assert config_from_connection(conn).connection is conn
    with pytest.raises(InvalidArgument):
        config_from_connection(None)

    assert make_dbspec(engine).datasource is engine
    assert make_dbspec(conn).connection is conn
    with pytest.raises(InvalidArgument):
        make_dbspec(42)
