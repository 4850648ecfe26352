from __future__ import annotations

from typing import Any, Dict, Optional

import sqlalchemy as sa

from .abstract import AbstractSql
from .predicate import TableSpec, resolve_table


class Delete(AbstractSql):
    """DELETE builder."""

    def __init__(self, table: Optional[TableSpec] = None) -> None:
        super().__init__()
        if table is not None:
            self.from_(table)

    def from_(self, table: TableSpec) -> "Delete":
        self._set_table(table)
        return self

    def _raw_state(self) -> Dict[str, Any]:
        return {
            "table": self._table,
            "where": list(self._where),
        }

    def get_statement(self) -> sa.Delete:
        stmt = sa.delete(resolve_table(self._require_table()))
        where = self._where_clause()
        if where is not None:
            stmt = stmt.where(where)
        return stmt
