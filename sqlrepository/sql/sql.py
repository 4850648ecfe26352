from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.exc import CompileError

from sqlrepository.db.adapter import Adapter, Statement
from sqlrepository.exceptions import InvalidArgumentError, RepositorySetupError

from .abstract import AbstractSql
from .delete import Delete
from .insert import Insert
from .predicate import TableSpec, validate_table
from .select import Select
from .update import Update


class Sql:
    """
    Factory for statement builders bound to one adapter and, optionally, to
    a single table.
    """

    def __init__(self, adapter: Optional[Adapter] = None, table: Optional[TableSpec] = None) -> None:
        self._adapter = adapter
        self._table: Optional[TableSpec] = None
        if table is not None:
            self.set_table(table)

    def get_adapter(self) -> Optional[Adapter]:
        return self._adapter

    def has_table(self) -> bool:
        return self._table is not None

    def get_table(self) -> Optional[TableSpec]:
        return self._table

    def set_table(self, table: TableSpec) -> "Sql":
        validate_table(table)
        self._table = table
        return self

    def _table_for(self, table: Optional[TableSpec]) -> Optional[TableSpec]:
        if self._table is None:
            return table
        if table is not None and table != self._table:
            raise InvalidArgumentError(
                f"This Sql object is intended to work with only the table {self._table!r} "
                "provided at construction time."
            )
        return self._table

    def select(self, table: Optional[TableSpec] = None) -> Select:
        return Select(self._table_for(table))

    def insert(self, table: Optional[TableSpec] = None) -> Insert:
        return Insert(self._table_for(table))

    def update(self, table: Optional[TableSpec] = None) -> Update:
        return Update(self._table_for(table))

    def delete(self, table: Optional[TableSpec] = None) -> Delete:
        return Delete(self._table_for(table))

    def _require_adapter(self, adapter: Optional[Adapter]) -> Adapter:
        adapter = adapter or self._adapter
        if adapter is None:
            raise RepositorySetupError("This Sql object does not have an Adapter setup")
        return adapter

    def prepare_statement_for_sql_object(
        self, sql_object: AbstractSql, adapter: Optional[Adapter] = None
    ) -> Statement:
        """Compile a builder into a Statement ready to execute on the adapter."""
        return Statement(self._require_adapter(adapter), sql_object.get_statement())

    def build_sql_string(self, sql_object: AbstractSql, adapter: Optional[Adapter] = None) -> str:
        """Render a builder as SQL text with literal values, for logging and debugging."""
        adapter = adapter or self._adapter
        dialect: Any = adapter.get_dialect() if adapter is not None else None
        statement = sql_object.get_statement()
        try:
            return str(statement.compile(dialect=dialect, compile_kwargs={"literal_binds": True}))
        except CompileError:
            # values without a literal renderer (e.g. untyped objects) stay as placeholders
            return str(statement.compile(dialect=dialect))
