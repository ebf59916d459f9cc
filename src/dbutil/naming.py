"""Default identifier converters with no internal dependencies.

Database identifiers are conventionally snake_case or upper-case while
Python callers prefer hyphenated lower-case keys. The pair below is the
least common denominator that works with most databases; a `DbSpec` may
replace either function.
"""
from enum import Enum
from typing import Any

__all__ = ['Ident', 'as_string', 'default_to_db', 'default_to_host']


class Ident(str):
    """Symbolic host identifier, e.g. ``Ident('table-name')``.

    It is a plain string for comparison, hashing and mapping lookups, so
    ``row.get('table-name')`` and ``row.get(Ident('table-name'))`` agree.
    Only the default ``to_db`` converter treats it differently from ``str``.
    """

    __slots__ = ()


def as_string(form: Any) -> str:
    """Render a form as its bare name.

    >>> as_string(Ident('one'))
    'one'
    >>> as_string(12)
    '12'
    """
    if isinstance(form, Enum):
        return form.name
    return str(form)


def default_to_db(form: Any) -> Any:
    """Convert a Python form to a database identifier.

    Plain strings are taken as already converted. Lists and tuples are
    converted element-wise into a list. Anything else (``Ident``, enum
    members, numbers) is stringified with every ``-`` replaced by ``_``.
    """
    if type(form) is str:
        return form
    if isinstance(form, list | tuple):
        return [default_to_db(each) for each in form]
    return as_string(form).replace('-', '_')


def default_to_host(name: str) -> Ident:
    """Convert a database identifier to a lower-case hyphenated ``Ident``.
    """
    return Ident(name.lower().replace('_', '-'))
