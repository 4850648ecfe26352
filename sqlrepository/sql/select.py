from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import sqlalchemy as sa
from sqlalchemy.sql.elements import ClauseElement

from sqlrepository.exceptions import InvalidArgumentError

from .abstract import AbstractSql
from .join import Join
from .predicate import TableSpec, column_ref, raw_condition, resolve_table, table_name

Columns = Union[Sequence[Any], Mapping[str, Any]]


class Select(AbstractSql):
    """SELECT builder."""

    SQL_STAR = "*"
    ORDER_ASCENDING = "ASC"
    ORDER_DESCENDING = "DESC"

    def __init__(self, table: Optional[TableSpec] = None) -> None:
        super().__init__()
        self._columns: Columns = [self.SQL_STAR]
        self._joins = Join()
        self._order: List[Any] = []
        self._group: List[Any] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        if table is not None:
            self.from_(table)

    def from_(self, table: TableSpec) -> "Select":
        self._set_table(table)
        return self

    def columns(self, columns: Columns) -> "Select":
        """
        Set the selected columns: a list of names/expressions, or a mapping
        of {label: name_or_expression}.
        """
        if isinstance(columns, str):
            raise InvalidArgumentError("Select columns must be a list or a mapping")
        self._columns = dict(columns) if isinstance(columns, Mapping) else list(columns)
        return self

    def join(
        self,
        name: TableSpec,
        on: Any,
        columns: Optional[Sequence[str]] = None,
        join_type: str = Join.INNER,
    ) -> "Select":
        """Join `name`; its columns default to all of them (`name.*`)."""
        if columns is None:
            columns = [self.SQL_STAR]
        self._joins.join(name, on, columns, join_type)
        return self

    def order(self, order: Any) -> "Select":
        """Accepts "name DESC", a list of those, or a {column: direction} mapping."""
        if isinstance(order, Mapping):
            self._order.extend(f"{k} {v}" for k, v in order.items())
        elif isinstance(order, (list, tuple)):
            self._order.extend(order)
        else:
            self._order.append(order)
        return self

    def group(self, group: Any) -> "Select":
        if isinstance(group, (list, tuple)):
            self._group.extend(group)
        else:
            self._group.append(group)
        return self

    def limit(self, limit: int) -> "Select":
        if not isinstance(limit, int) or limit < 0:
            raise InvalidArgumentError("Limit must be a non-negative integer")
        self._limit = limit
        return self

    def offset(self, offset: int) -> "Select":
        if not isinstance(offset, int) or offset < 0:
            raise InvalidArgumentError("Offset must be a non-negative integer")
        self._offset = offset
        return self

    def _raw_state(self) -> Dict[str, Any]:
        return {
            "table": self._table,
            "columns": self._columns,
            "where": list(self._where),
            "joins": self._joins.get_joins(),
            "order": list(self._order),
            "group": list(self._group),
            "limit": self._limit,
            "offset": self._offset,
        }

    @staticmethod
    def _column(column: Any, owner: Optional[str] = None) -> Any:
        if isinstance(column, ClauseElement):
            return column
        if column == Select.SQL_STAR:
            return sa.literal_column(f"{owner}.*" if owner else "*")
        if owner and "." not in column:
            column = f"{owner}.{column}"
        if "." in column:
            # rows are keyed by the bare column name, as the driver reports it
            return column_ref(column).label(column.rpartition(".")[2])
        return column_ref(column)

    def _column_elements(self) -> List[Any]:
        owner = table_name(self._table) if self._joins.count() else None
        if isinstance(self._columns, Mapping):
            return [self._column(c, owner).label(label) for label, c in self._columns.items()]
        return [self._column(c, owner) for c in self._columns]

    @staticmethod
    def _order_element(order: Any) -> Any:
        if isinstance(order, ClauseElement):
            return order
        name, _, direction = str(order).strip().partition(" ")
        column = column_ref(name)
        if direction.strip().upper() == Select.ORDER_DESCENDING:
            return column.desc()
        return column.asc()

    def get_statement(self) -> sa.Select:
        from_clause = resolve_table(self._require_table())
        columns = self._column_elements()

        for join_spec in self._joins:
            target = resolve_table(join_spec["name"])
            on = raw_condition(join_spec["on"])
            join_type = join_spec["type"]
            if join_type in (Join.RIGHT, Join.RIGHT_OUTER):
                from_clause = target.join(from_clause, on, isouter=True)
            else:
                from_clause = from_clause.join(
                    target,
                    on,
                    isouter=join_type in (Join.LEFT, Join.LEFT_OUTER, Join.OUTER),
                    full=join_type == Join.FULL_OUTER,
                )
            owner = table_name(join_spec["name"])
            columns.extend(self._column(c, owner) for c in join_spec["columns"])

        stmt = sa.select(*columns).select_from(from_clause)
        where = self._where_clause()
        if where is not None:
            stmt = stmt.where(where)
        if self._group:
            stmt = stmt.group_by(*[g if isinstance(g, ClauseElement) else column_ref(g) for g in self._group])
        if self._order:
            stmt = stmt.order_by(*[self._order_element(o) for o in self._order])
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        if self._offset is not None:
            stmt = stmt.offset(self._offset)
        return stmt
