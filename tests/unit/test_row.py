"""
Tests for the Row record type.
"""
import pytest
from dbutil import Ident, Row, is_row, make_row


@pytest.fixture
def dup_row():
    """Row with duplicate labels ID, ID and values 1, 2"""
    return Row(['ID', 'ID'], [1, 2], {Ident('id'): 2})


def test_positional_and_name_lookup(dup_row):
    """Positions reach every column, names reach the last duplicate"""
    assert dup_row.get(0) == 1
    assert dup_row.get(1) == 2
    assert dup_row.get('id') == 2
    assert dup_row.get(Ident('id')) == 2


def test_lookup_default(dup_row):
    """Missing keys return the caller's default, else None"""
    assert dup_row.get('missing') is None
    assert dup_row.get('missing', 'dflt') == 'dflt'
    assert dup_row.get(2, 'dflt') == 'dflt'
    assert dup_row.get(-1, 'dflt') == 'dflt'


def test_only_int_keys_are_positional():
    """String digits and booleans are looked up as names"""
    row = Row(['0', 'FLAG'], ['zero', 'flag'], {'0': 'by-name', True: 'bool-key'})
    assert row.get(0) == 'zero'
    assert row.get('0') == 'by-name'
    assert row.get(True) == 'bool-key'


def test_position_not_defeated_by_int_name():
    """A name equal to a valid position never shadows the position"""
    row = Row(['A', 'B'], ['a', 'b'], {1: 'named'})
    assert row.get(1) == 'b'


def test_call_and_getitem(dup_row):
    """Call form mirrors get, indexing raises KeyError when absent"""
    assert dup_row() == 1
    assert dup_row(1) == 2
    assert dup_row('nope', 0) == 0
    assert dup_row['id'] == 2
    assert dup_row[0] == 1
    with pytest.raises(KeyError):
        dup_row['nope']
    assert 'id' in dup_row
    assert 1 in dup_row
    assert 'nope' not in dup_row


def test_accessors(dup_row):
    """Labels, values and mapping are exposed in order"""
    assert dup_row.labels == ('ID', 'ID')
    assert dup_row.values == (1, 2)
    assert dict(dup_row.named_values) == {'id': 2}
    assert dup_row.as_dict() == {'id': 2}
    assert len(dup_row) == 2
    assert list(dup_row) == [1, 2]


def test_immutable(dup_row):
    """Rows cannot be modified"""
    with pytest.raises(TypeError):
        dup_row.named_values['id'] = 5
    with pytest.raises(AttributeError):
        dup_row.labels = ('X',)
    as_dict = dup_row.as_dict()
    as_dict['id'] = 99
    assert dup_row.get('id') == 2


def test_label_value_mismatch():
    """Labels and values must have the same length"""
    with pytest.raises(ValueError):
        Row(['A', 'B'], [1], {'a': 1})


def test_equality_ignores_labels():
    """Rows differing only in original labels are equal"""
    upper = Row(['NAME', 'VALUE'], ['x', 1], {'name': 'x', 'value': 1})
    lower = Row(['name', 'value'], ['x', 1], {'name': 'x', 'value': 1})
    assert upper == lower
    assert hash(upper) == hash(lower)


def test_inequality_on_values():
    """Rows with the same labels but different values differ"""
    a = Row(['NAME'], ['x'], {'name': 'x'})
    b = Row(['NAME'], ['y'], {'name': 'y'})
    assert a != b
    assert a != ('x',)


def test_inequality_on_mapping():
    """Equal positional values with different keys differ"""
    a = Row(['A'], [1], {'a': 1})
    b = Row(['B'], [1], {'b': 1})
    assert a != b


def test_str_renders_three_lines(dup_row):
    """String form shows labels, values and mapping"""
    lines = str(dup_row).splitlines()
    assert lines == ["['ID', 'ID']", '[1, 2]', "{'id': 2}"]


def test_custom_lookup():
    """A custom lookup replaces the default dispatch"""
    row = make_row(['A'], [1], {'a': 1}, lambda key, default: ('custom', key, default))
    assert row.get('a') == ('custom', 'a', None)
    assert row(0, 'd') == ('custom', 0, 'd')


def test_is_row():
    assert is_row(Row([], [], {}))
    assert not is_row({'a': 1})


def test_unhashable_key_returns_default():
    """Keys that cannot name a column fall back to the default"""
    row = Row(['A'], [1], {'a': 1})
    assert row.get(['a'], 'dflt') == 'dflt'
    assert row.get({'a': 1}) is None
    assert ['a'] not in row
    with pytest.raises(KeyError):
        row[['a']]


def test_hash_with_unhashable_values():
    """Rows holding arrays or json documents are still hashable"""
    a = Row(['TAGS', 'DOC'], [['x', 'y'], {'k': 1}], {'tags': ['x', 'y'], 'doc': {'k': 1}})
    b = Row(['tags', 'doc'], [['x', 'y'], {'k': 1}], {'tags': ['x', 'y'], 'doc': {'k': 1}})
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
