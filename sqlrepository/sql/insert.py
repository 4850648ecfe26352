from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import sqlalchemy as sa

from sqlrepository.exceptions import InvalidArgumentError

from .abstract import AbstractSql
from .predicate import TableSpec, bind_value, is_aliased, resolve_table
from .select import Select


class Insert(AbstractSql):
    """INSERT builder. Values come from a column mapping or from a Select."""

    VALUES_MERGE = "merge"
    VALUES_SET = "set"

    def __init__(self, table: Optional[TableSpec] = None) -> None:
        super().__init__()
        self._columns: List[str] = []
        self._values: List[Any] = []
        self._select: Optional[Select] = None
        if table is not None:
            self.into(table)

    def into(self, table: TableSpec) -> "Insert":
        self._set_table(table)
        return self

    def columns(self, columns: Sequence[str]) -> "Insert":
        self._columns = list(columns)
        return self

    def values(
        self,
        values: Union[Mapping[str, Any], Sequence[Any], Select],
        flag: str = VALUES_SET,
    ) -> "Insert":
        if flag not in (self.VALUES_SET, self.VALUES_MERGE):
            raise InvalidArgumentError(f"Unknown values flag {flag!r}")

        if isinstance(values, Select):
            if flag == self.VALUES_MERGE:
                raise InvalidArgumentError("A Select cannot be merged into existing values")
            self._select = values
            self._values = []
            return self

        if isinstance(values, Mapping):
            if flag == self.VALUES_SET or self._select is not None:
                self._columns, self._values = [], []
                self._select = None
            for column, value in values.items():
                if column in self._columns:
                    self._values[self._columns.index(column)] = value
                else:
                    self._columns.append(column)
                    self._values.append(value)
            return self

        # positional values line up with previously declared columns
        values = list(values)
        if len(values) != len(self._columns):
            raise InvalidArgumentError(
                "Positional values require columns() to declare a matching column list"
            )
        self._values = values
        self._select = None
        return self

    def _raw_state(self) -> Dict[str, Any]:
        return {
            "table": self._table,
            "columns": list(self._columns),
            "values": list(self._values),
            "select": self._select,
        }

    def where(self, predicate: Any) -> "Insert":
        raise InvalidArgumentError("INSERT statements do not take a WHERE clause")

    def get_statement(self) -> sa.Insert:
        table = self._require_table()
        if is_aliased(table):
            raise InvalidArgumentError(
                "INSERT cannot target an aliased table; unalias it before building"
            )
        target = resolve_table(table, self._columns)
        if self._select is not None:
            return sa.insert(target).from_select(self._columns, self._select.get_statement())
        if not self._columns:
            raise InvalidArgumentError("Insert has no values")
        return sa.insert(target).values(
            {column: bind_value(value) for column, value in zip(self._columns, self._values)}
        )
