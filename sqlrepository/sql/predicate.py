"""
Translation of loosely typed table and predicate arguments into SQLAlchemy
Core constructs.

Tables may be given as:
  - "name" or "schema.name"
  - {"alias": "name"} (an aliased table)
  - a SQLAlchemy Table/TableClause (or any FromClause)

Predicates may be given as:
  - a raw SQL fragment ("id = 2")
  - a mapping of column -> value ({"id": 2, "deleted_at": None, "status": ["a", "b"]})
  - a list/tuple mixing any of the above, combined with AND
  - a SQLAlchemy expression
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

import sqlalchemy as sa
from sqlalchemy.sql.elements import ClauseElement, ColumnElement
from sqlalchemy.sql.expression import FromClause

from sqlrepository.exceptions import InvalidArgumentError

TableSpec = Union[str, Mapping[str, Any], FromClause]


def is_aliased(table: Any) -> bool:
    """True when the table is given as an {alias: table} mapping."""
    return isinstance(table, Mapping)


def unalias(table: TableSpec) -> Any:
    """Return the real table of an {alias: table} mapping, or the table itself."""
    if is_aliased(table):
        return next(iter(table.values()))
    return table


def validate_table(table: Any) -> None:
    if isinstance(table, (str, FromClause)):
        return
    if isinstance(table, Mapping):
        if len(table) != 1:
            raise InvalidArgumentError(
                "An aliased table must be a mapping with exactly one {alias: table} entry"
            )
        alias, real = next(iter(table.items()))
        if not isinstance(alias, str) or not isinstance(real, (str, FromClause)):
            raise InvalidArgumentError("Aliased table must map a string alias to a table")
        return
    raise InvalidArgumentError(
        f"Table must be a string, an {{alias: table}} mapping or a FromClause, got {type(table).__name__}"
    )


def table_name(table: TableSpec) -> str:
    """Name the statement refers to the table by (the alias when aliased)."""
    if is_aliased(table):
        return next(iter(table.keys()))
    if isinstance(table, str):
        return table.rpartition(".")[2]
    return getattr(table, "name", str(table))


def resolve_table(table: TableSpec, columns: Iterable[str] = ()) -> FromClause:
    """
    Build a FromClause for a table argument.

    Lightweight tables are created for string names; `columns` declares the
    column names a DML statement will write to.
    """
    validate_table(table)
    if isinstance(table, FromClause):
        return table
    if is_aliased(table):
        alias, real = next(iter(table.items()))
        return resolve_table(real, columns).alias(alias)
    schema, _, name = table.rpartition(".")
    return sa.table(name, *[sa.column(c) for c in columns], schema=schema or None)


def column_ref(name: str) -> ColumnElement[Any]:
    """
    A column reference that does not pull a table into the FROM list.

    Qualified names ("owner.column") are rendered verbatim.
    """
    if "." in name:
        return sa.literal_column(name)
    return sa.column(name)


def raw_condition(condition: Any) -> ColumnElement[Any]:
    """Normalize a JOIN ON condition; strings are rendered verbatim."""
    if isinstance(condition, str):
        return sa.literal_column(condition)
    predicate = build_predicate(condition)
    if predicate is None:
        raise InvalidArgumentError("A join requires an ON condition")
    return predicate


def _compare(key: str, value: Any) -> ColumnElement[bool]:
    column = column_ref(key)
    if value is None:
        return column.is_(None)
    if isinstance(value, (list, tuple, set, frozenset)):
        return column.in_(list(value))
    return column == value


def build_predicate(predicate: Any) -> Optional[Any]:
    """
    Normalize a WHERE argument into a single SQLAlchemy clause.

    Returns None when there is nothing to filter on.
    """
    if predicate is None:
        return None
    if isinstance(predicate, ClauseElement):
        return predicate
    if isinstance(predicate, str):
        return sa.text(predicate)

    clauses: List[Any]
    if isinstance(predicate, Mapping):
        clauses = [_compare(key, value) for key, value in predicate.items()]
    elif isinstance(predicate, (list, tuple)):
        clauses = [c for c in (build_predicate(p) for p in predicate) if c is not None]
    else:
        raise InvalidArgumentError(
            f"Unsupported predicate type {type(predicate).__name__}"
        )

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return sa.and_(*clauses)


def bind_value(value: Any) -> Any:
    """Wrap a plain value as a typed literal so it renders with its own type."""
    if isinstance(value, ClauseElement):
        return value
    return sa.literal(value)
