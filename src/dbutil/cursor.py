"""
Lazy production of Rows from tabular cursors.

`row_seq` reads any object satisfying `TabularCursor`: a forward-only
cursor with column metadata and per-row cell access (positions are
1-based there, as in most driver metadata APIs). PEP-249 cursors are
adapted by `DbApiCursor`; in-memory records by `RecordCursor`.

Compared with iterating a DB-API cursor directly, `row_seq`:

1. keeps the column order of the result set in every row
2. keeps the original column labels, in order, duplicates included
3. makes every column reachable by its zero-based position
4. converts labels to keys with the active spec's `to_host`
"""
import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Protocol, runtime_checkable

from dbutil.identifiers import to_host_identifier
from dbutil.options import DbSpec
from dbutil.row import Row

__all__ = [
    'TabularCursor',
    'DbApiCursor',
    'RecordCursor',
    'row_seq',
    'colvalue_seq',
]

logger = logging.getLogger(__name__)


@runtime_checkable
class TabularCursor(Protocol):
    """Forward-only cursor over a result set."""

    def column_count(self) -> int: ...

    def column_label(self, position: int) -> str: ...

    def advance(self) -> bool: ...

    def value(self, key: int | str) -> Any: ...


class _RowCursor:
    """Shared cell access over the current row tuple."""

    _labels: list[str]
    _current: Sequence[Any] | None

    def column_count(self) -> int:
        return len(self._labels)

    def column_label(self, position: int) -> str:
        if not 1 <= position <= len(self._labels):
            raise IndexError(f'Column position out of range: {position}')
        return self._labels[position - 1]

    def value(self, key: int | str) -> Any:
        """Cell of the current row by 1-based position or by label.

        A duplicated label resolves to its first column.
        """
        if self._current is None:
            raise LookupError('Cursor is not positioned on a row')
        if isinstance(key, str):
            position = self._labels.index(key) + 1
        else:
            position = key
        if not 1 <= position <= len(self._labels):
            raise IndexError(f'Column position out of range: {position}')
        return self._current[position - 1]


class DbApiCursor(_RowCursor):
    """`TabularCursor` over a PEP-249 cursor that has executed a query.
    """

    def __init__(self, cursor: Any) -> None:
        if cursor.description is None:
            raise ValueError('Cursor has no result set')
        self.dbapi_cursor = cursor
        self._labels = [desc[0] for desc in cursor.description]
        self._current = None
        self._exhausted = False

    def advance(self) -> bool:
        if self._exhausted:
            return False
        row = self.dbapi_cursor.fetchone()
        if row is None:
            self._exhausted = True
            self._current = None
            return False
        self._current = row
        return True


class RecordCursor(_RowCursor):
    """`TabularCursor` over in-memory records.

    Args:
        labels: column labels
        records: iterable of sequences, one value per label
    """

    def __init__(self, labels: Sequence[str], records: Iterable[Sequence[Any]]) -> None:
        self._labels = list(labels)
        self._records = iter(records)
        self._current = None

    def advance(self) -> bool:
        record = next(self._records, None)
        if record is None:
            self._current = None
            return False
        if len(record) != len(self._labels):
            raise ValueError(f'Record has {len(record)} values for {len(self._labels)} columns')
        self._current = record
        return True


def _as_tabular(cursor: Any) -> TabularCursor:
    if isinstance(cursor, TabularCursor):
        return cursor
    if hasattr(cursor, 'description') and hasattr(cursor, 'fetchone'):
        return DbApiCursor(cursor)
    raise TypeError(f'Not a tabular or DB-API cursor: {type(cursor).__name__}')


def row_seq(cursor: Any, spec: DbSpec | None = None) -> Iterator[Row]:
    """Lazily yield a Row for each remaining row of the cursor.

    The sequence is finite and single-pass: it consumes the cursor, so a
    fresh cursor is needed for a fresh sequence. Nothing is read ahead of
    the row being built and produced rows are not retained. Cursor errors
    propagate unchanged when the failing row is requested.

    When converted labels collide, the later column's value is the one
    reachable by name; every value stays reachable by position.
    """
    rs = _as_tabular(cursor)
    positions = range(1, rs.column_count() + 1)
    labels = [rs.column_label(i) for i in positions]
    keys = [to_host_identifier(label, spec) for label in labels]
    count = 0
    while rs.advance():
        values = [rs.value(i) for i in positions]
        # later positions overwrite earlier ones on a key collision
        named_values = dict(zip(keys, values))
        count += 1
        yield Row(labels, values, named_values)
    logger.debug(f'Cursor exhausted after {count} rows')


def colvalue_seq(rows: Iterable[Row], column_key: Any) -> Iterator[Any]:
    """Lazily yield the value of `column_key` from each row."""
    return (row.get(column_key) for row in rows)
