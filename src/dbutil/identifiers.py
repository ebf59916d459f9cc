"""
Conversion of identifiers between Python and the database.

Every catalog, schema, table and column name that crosses between the
two sides goes through the converter pair of the active spec, so one
process can talk to differently-cased databases by binding another spec.
"""
from collections.abc import Iterable
from typing import Any

from dbutil.exceptions import InvalidArgument
from dbutil.naming import Ident
from dbutil.options import DbSpec

__all__ = ['to_db_identifier', 'join_db_identifiers', 'to_host_identifier']


def _spec(spec: DbSpec | None) -> DbSpec:
    if spec is not None:
        return spec
    from dbutil.context import current_spec
    return current_spec()


def to_db_identifier(form: Any, spec: DbSpec | None = None) -> Any:
    """Convert a Python form to a database identifier.

    >>> to_db_identifier(Ident('Hello-Morris'))
    'Hello_Morris'
    """
    if form is None:
        raise InvalidArgument('Identifier must not be None')
    return _spec(spec).to_db(form)


def join_db_identifiers(forms: Iterable[Any], spec: DbSpec | None = None) -> str:
    """Convert forms to database identifiers joined by commas.

    >>> join_db_identifiers([Ident('a-a'), Ident('b-b')])
    'a_a,b_b'
    """
    if isinstance(forms, str | bytes) or not isinstance(forms, Iterable):
        raise InvalidArgument(f'Expected a collection of identifiers, got {type(forms).__name__}')
    spec = _spec(spec)
    return ','.join(str(to_db_identifier(form, spec)) for form in forms)


def to_host_identifier(name: str, spec: DbSpec | None = None) -> Ident | Any:
    """Convert a database identifier to its Python form.

    >>> to_host_identifier('Hello_Morris')
    'hello-morris'
    """
    if not isinstance(name, str):
        raise InvalidArgument(f'Database identifier must be a string, got {type(name).__name__}')
    key = _spec(spec).to_host(name)
    if key is None:
        raise InvalidArgument(f'to_host converter returned None for {name!r}')
    return key
