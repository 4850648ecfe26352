from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import sqlalchemy as sa

from sqlrepository.exceptions import InvalidArgumentError

from .abstract import AbstractSql
from .join import Join
from .predicate import TableSpec, bind_value, is_aliased, raw_condition, resolve_table, table_name


class Update(AbstractSql):
    """
    UPDATE builder.

    Joins are compiled portably rather than as MySQL-style UPDATE ... JOIN:
    INNER and RIGHT joins only keep target rows that have a match, so they
    become a correlated EXISTS filter; LEFT and OUTER joins keep every target
    row and add no filter. SET values must reference the target table.
    """

    VALUES_MERGE = "merge"
    VALUES_SET = "set"

    def __init__(self, table: Optional[TableSpec] = None) -> None:
        super().__init__()
        self._set: Dict[str, Any] = {}
        self._joins = Join()
        if table is not None:
            self.table(table)

    def table(self, table: TableSpec) -> "Update":
        self._set_table(table)
        return self

    def set(self, values: Mapping[str, Any], flag: str = VALUES_SET) -> "Update":
        if not isinstance(values, Mapping):
            raise InvalidArgumentError("set() expects a mapping of column -> value")
        if flag == self.VALUES_SET:
            self._set = dict(values)
        elif flag == self.VALUES_MERGE:
            self._set.update(values)
        else:
            raise InvalidArgumentError(f"Unknown values flag {flag!r}")
        return self

    def join(self, name: TableSpec, on: Any, join_type: str = Join.INNER) -> "Update":
        self._joins.join(name, on, None, join_type)
        return self

    def _raw_state(self) -> Dict[str, Any]:
        return {
            "table": self._table,
            "set": dict(self._set),
            "where": list(self._where),
            "joins": self._joins.get_joins(),
        }

    def _target_columns(self, table: TableSpec) -> Dict[str, Any]:
        owner = table_name(table)
        values = {}
        for key, value in self._set.items():
            prefix, _, column = key.rpartition(".")
            if prefix and prefix.rpartition(".")[2] != owner:
                raise InvalidArgumentError(
                    f"Cannot SET {key!r}: only columns of {owner!r} can be updated"
                )
            values[column] = bind_value(value)
        return values

    def get_statement(self) -> sa.Update:
        table = self._require_table()
        if is_aliased(table):
            raise InvalidArgumentError(
                "UPDATE cannot target an aliased table; unalias it before building"
            )
        if not self._set:
            raise InvalidArgumentError("Update has no values to set")

        values = self._target_columns(table)
        stmt = sa.update(resolve_table(table, values.keys())).values(values)

        where = self._where_clause()
        if where is not None:
            stmt = stmt.where(where)

        for join_spec in self._joins:
            if join_spec["type"] not in (Join.INNER, Join.RIGHT, Join.RIGHT_OUTER):
                continue
            matches = (
                sa.select(sa.literal_column("1"))
                .select_from(resolve_table(join_spec["name"]))
                .where(raw_condition(join_spec["on"]))
            )
            stmt = stmt.where(matches.exists())
        return stmt
