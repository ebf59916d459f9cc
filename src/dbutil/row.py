"""Row type for tabular results, plus a psycopg row factory producing it.

A row is a sequence of column values that also behaves as a mapping: a
value is reachable by its zero-based position or by the converted form of
its column label. Rows may carry duplicate column labels; positions are
always unique.
"""
from collections.abc import Callable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from dbutil.identifiers import to_host_identifier

__all__ = ['Row', 'make_row', 'is_row', 'RowFactory']

_MISSING = object()


class Row:
    """Immutable ordered record.

    Args:
        labels: original column labels in cursor order
        values: cell values, one per label
        named_values: converted label -> value; on a collision the later
            column wins
        lookup: optional ``lookup(key, default)`` replacing the default
            position-then-name dispatch
    """

    __slots__ = ('_labels', '_values', '_named_values', '_lookup')

    def __init__(self, labels: Sequence[str], values: Sequence[Any],
                 named_values: Mapping[Any, Any],
                 lookup: Callable[[Any, Any], Any] | None = None) -> None:
        if len(labels) != len(values):
            raise ValueError(f'{len(labels)} labels for {len(values)} values')
        self._labels = tuple(labels)
        self._values = tuple(values)
        self._named_values = MappingProxyType(dict(named_values))
        self._lookup = lookup

    @property
    def labels(self) -> tuple[str, ...]:
        """Original column labels in the order they exist in the row."""
        return self._labels

    @property
    def values(self) -> tuple[Any, ...]:
        """Column values in the order they exist in the row."""
        return self._values

    @property
    def named_values(self) -> Mapping[Any, Any]:
        """Read-only mapping of converted label to value."""
        return self._named_values

    def as_dict(self) -> dict[Any, Any]:
        return dict(self._named_values)

    def _dispatch(self, key: Any, default: Any) -> Any:
        # only true ints are positions, so '0' and True are names
        if type(key) is int and 0 <= key < len(self._values):
            return self._values[key]
        try:
            return self._named_values.get(key, default)
        except TypeError:
            # unhashable keys never name a column
            return default

    def get(self, key: Any, default: Any = None) -> Any:
        """Value at position `key` (an int) or under converted name `key`.

        Positions win over names. Returns `default` when neither matches.
        """
        if self._lookup is not None:
            return self._lookup(key, default)
        return self._dispatch(key, default)

    def __call__(self, key: Any = 0, default: Any = None) -> Any:
        return self.get(key, default)

    def __getitem__(self, key: Any) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: Any) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return (self._values == other._values
                and self._named_values == other._named_values)

    def __hash__(self) -> int:
        try:
            return hash((self._values, frozenset(self._named_values.items())))
        except TypeError:
            # driver values such as arrays (list) and json (dict)
            return hash(len(self._values))

    def __str__(self) -> str:
        return '\n'.join([
            str(list(self._labels)),
            str(list(self._values)),
            str(dict(self._named_values)),
            ])

    def __repr__(self) -> str:
        return f'Row({dict(self._named_values)!r})'


def make_row(labels: Sequence[str], values: Sequence[Any],
             named_values: Mapping[Any, Any],
             lookup: Callable[[Any, Any], Any] | None = None) -> Row:
    """Create a Row."""
    return Row(labels, values, named_values, lookup)


def is_row(x: Any) -> bool:
    return isinstance(x, Row)


class RowFactory:
    """Row factory for psycopg that returns Row objects.

    Pass the class as ``row_factory`` when creating a psycopg cursor. Column
    labels are read once per result set; each label is converted with the
    active spec's ``to_host``.
    """

    def __init__(self, cursor: Any) -> None:
        """Initialize with cursor to extract column metadata.

        Args:
            cursor: psycopg cursor with description attribute
        """
        self.labels = [c.name for c in (cursor.description or [])]
        self.keys = [to_host_identifier(label) for label in self.labels]

    def __call__(self, values: Sequence[Any]) -> Row:
        """Convert a row tuple to a Row.

        Args:
            values: Sequence of column values from cursor

        Returns
            Row with the cursor's labels
        """
        return Row(self.labels, values, dict(zip(self.keys, values)))
