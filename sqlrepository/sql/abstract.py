from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import Executable

from sqlrepository.exceptions import InvalidArgumentError

from .predicate import TableSpec, build_predicate, validate_table


class AbstractSql(ABC):
    """
    Mutable statement builder.

    Builders collect their parts in place and only produce an (immutable)
    SQLAlchemy construct when get_statement() is called.
    """

    def __init__(self) -> None:
        self._table: Optional[TableSpec] = None
        self._where: List[Any] = []

    def _set_table(self, table: TableSpec) -> None:
        validate_table(table)
        self._table = table

    def _require_table(self) -> TableSpec:
        if self._table is None:
            raise InvalidArgumentError(f"{type(self).__name__} has no table set")
        return self._table

    def where(self, predicate: Any) -> "AbstractSql":
        """Add a filter; repeated calls are combined with AND."""
        if predicate is not None:
            # validated now, compiled in get_statement()
            build_predicate(predicate)
            self._where.append(predicate)
        return self

    def _where_clause(self) -> Optional[Any]:
        return build_predicate(self._where)

    def get_raw_state(self, key: Optional[str] = None) -> Any:
        state = self._raw_state()
        return state[key] if key is not None else state

    @abstractmethod
    def _raw_state(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def get_statement(self) -> Executable:
        """Build the SQLAlchemy construct for the current state."""
