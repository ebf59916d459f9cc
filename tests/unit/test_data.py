import pandas as pd
from dbutil import RecordCursor, row_seq, rows_to_dataframe, rows_to_dicts


def _rows(labels, records):
    return list(row_seq(RecordCursor(labels, records)))


def test_rows_to_dataframe():
    """Columns follow row order and are named by converted label"""
    df = rows_to_dataframe(_rows(['ID', 'USER_NAME'], [(1, 'a'), (2, 'b')]))
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ['id', 'user-name']
    assert df['user-name'].tolist() == ['a', 'b']
    assert df.attrs['labels'] == ['ID', 'USER_NAME']


def test_rows_to_dataframe_duplicate_labels():
    """Duplicate labels keep one DataFrame column per position"""
    df = rows_to_dataframe(_rows(['ID', 'ID'], [(1, 2)]))
    assert list(df.columns) == ['id', 'id']
    assert df.iloc[0].tolist() == [1, 2]


def test_rows_to_dataframe_empty():
    df = rows_to_dataframe([])
    assert isinstance(df, pd.DataFrame)
    assert df.empty


def test_rows_to_dicts():
    assert rows_to_dicts(_rows(['ID', 'ID'], [(1, 2)])) == [{'id': 2}]
