from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlrepository.exceptions import InvalidArgumentError

from .predicate import TableSpec, validate_table


class Join:
    """
    Ordered collection of JOIN specifications attached to a statement.

    Each specification is a dict with the keys name, on, columns and type.
    """

    INNER = "inner"
    OUTER = "outer"
    FULL_OUTER = "full outer"
    LEFT = "left"
    RIGHT = "right"
    LEFT_OUTER = "left outer"
    RIGHT_OUTER = "right outer"

    TYPES = (INNER, OUTER, FULL_OUTER, LEFT, RIGHT, LEFT_OUTER, RIGHT_OUTER)

    def __init__(self) -> None:
        self._joins: List[Dict[str, Any]] = []

    def join(
        self,
        name: TableSpec,
        on: Any,
        columns: Optional[Sequence[str]] = None,
        join_type: str = INNER,
    ) -> "Join":
        validate_table(name)
        if on is None:
            raise InvalidArgumentError("A join requires an ON condition")
        if join_type.lower() not in self.TYPES:
            raise InvalidArgumentError(f"Unknown join type {join_type!r}")
        self._joins.append(
            {
                "name": name,
                "on": on,
                "columns": list(columns) if columns is not None else [],
                "type": join_type.lower(),
            }
        )
        return self

    def get_joins(self) -> List[Dict[str, Any]]:
        return list(self._joins)

    def reset(self) -> "Join":
        self._joins = []
        return self

    def count(self) -> int:
        return len(self._joins)

    def __len__(self) -> int:
        return len(self._joins)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._joins)
