"""Data loaders turning Rows into other tabular shapes.
"""
from collections.abc import Iterable

import pandas as pd
from dbutil.identifiers import to_host_identifier
from dbutil.options import DbSpec
from dbutil.row import Row

__all__ = ['rows_to_dataframe', 'rows_to_dicts']


def rows_to_dataframe(rows: Iterable[Row], spec: DbSpec | None = None) -> pd.DataFrame:
    """Load rows into a pandas DataFrame.

    There is one DataFrame column per row position, named by the converted
    label, so duplicate labels become duplicate DataFrame columns. The
    original labels are kept in ``df.attrs['labels']``. Always returns a
    DataFrame, empty when there are no rows.
    """
    rows = list(rows)
    if not rows:
        return pd.DataFrame()

    labels = list(rows[0].labels)
    columns = [str(to_host_identifier(label, spec)) for label in labels]
    df = pd.DataFrame([list(row.values) for row in rows], columns=columns)
    df.attrs['labels'] = labels
    return df


def rows_to_dicts(rows: Iterable[Row]) -> list[dict]:
    """Minimal loader: each row as a dict of converted key to value."""
    return [row.as_dict() for row in rows]
