from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from sqlalchemy.sql.elements import ClauseElement

from sqlrepository.core.logging import operation_context
from sqlrepository.db.adapter import Adapter, Connection
from sqlrepository.db.result_set import ResultSet
from sqlrepository.exceptions import InvalidArgumentError, RepositorySetupError
from sqlrepository.sql import Delete, Insert, Join, Select, Sql, Update
from sqlrepository.sql.predicate import TableSpec, is_aliased, unalias

from .interface import BaseRepositoryInterface

logger = logging.getLogger(__name__)


def _is_customizer(where: Any) -> bool:
    return callable(where) and not isinstance(where, ClauseElement)


class AbstractBaseRepository(BaseRepositoryInterface):
    """
    Base class for repositories providing CRUD helpers over an Adapter.

    Subclasses supply the adapter (and optionally a prepared Sql factory);
    the factory is created lazily by initialize() when none was given.
    Setting `_columns` makes wildcard selects fetch that column list instead.

    Note:
      Driver and SQL errors are not caught here; sqlalchemy.exc exceptions
      reach the caller unchanged.
    """

    _adapter: Optional[Adapter] = None
    _sql: Optional[Sql] = None
    _columns: Sequence[Any] = ()
    _last_insert_value: Any = None
    _is_initialized: bool = False

    def is_initialized(self) -> bool:
        return self._is_initialized

    def initialize(self) -> "AbstractBaseRepository":
        """
        Prepare the repository for use. Safe to call repeatedly.

        Raises:
            RepositorySetupError: if no Adapter has been set.
        """
        if self._is_initialized:
            return self

        if not isinstance(self._adapter, Adapter):
            raise RepositorySetupError("This repository does not have an Adapter setup")

        if not isinstance(self._sql, Sql):
            self._sql = Sql(self._adapter)

        self._is_initialized = True
        return self

    def _ensure_initialized(self) -> Sql:
        if not self._is_initialized:
            self.initialize()
        assert self._sql is not None
        return self._sql

    def get_adapter(self) -> Optional[Adapter]:
        return self._adapter

    def get_columns(self) -> Sequence[Any]:
        return self._columns

    def get_sql(self) -> Optional[Sql]:
        return self._sql

    def get_connection(self) -> Connection:
        if self._adapter is None:
            raise RepositorySetupError("This repository does not have an Adapter setup")
        return self._adapter.get_connection()

    def get_last_insert_value(self) -> Any:
        return self._last_insert_value

    # select

    def select(
        self,
        table: TableSpec,
        where: Any = None,
        result_set_prototype: Optional[ResultSet] = None,
    ) -> ResultSet:
        """
        Select rows from `table`.

        `where` may be omitted, a callable receiving the in-progress Select,
        or anything Select.where() accepts.
        """
        sql = self._ensure_initialized()
        select = sql.select(table)

        if _is_customizer(where):
            where(select)
        elif where is not None:
            select.where(where)

        return self.select_with(select, result_set_prototype)

    def select_with(self, select: Select, result_set_prototype: Optional[ResultSet] = None) -> ResultSet:
        self._ensure_initialized()
        return self._execute_select(select, result_set_prototype)

    def _execute_select(self, select: Select, result_set_prototype: Optional[ResultSet] = None) -> ResultSet:
        if select.get_raw_state("columns") == [Select.SQL_STAR] and self._columns:
            select.columns(self._columns)

        with operation_context("select"):
            logger.debug("Executing SELECT on %r", select.get_raw_state("table"))
            statement = self._sql.prepare_statement_for_sql_object(select)
            result = statement.execute()

        result_set = result_set_prototype if result_set_prototype is not None else ResultSet()
        result_set.initialize(result)
        return result_set

    # insert

    def insert(self, table: TableSpec, values: Mapping[str, Any]) -> int:
        sql = self._ensure_initialized()
        insert = sql.insert(table)
        insert.values(values)
        return self._execute_insert(insert)

    def insert_with(self, insert: Insert) -> int:
        self._ensure_initialized()
        return self._execute_insert(insert)

    def _execute_insert(self, insert: Insert) -> int:
        table = insert.get_raw_state("table")

        # Most RDBMS solutions do not allow using table aliases in INSERTs
        unaliased = is_aliased(table)
        if unaliased:
            insert.into(unalias(table))

        try:
            with operation_context("insert"):
                logger.debug("Executing INSERT into %r", insert.get_raw_state("table"))
                statement = self._sql.prepare_statement_for_sql_object(insert)
                result = statement.execute()
                self._last_insert_value = self.get_connection().get_last_generated_value()
        finally:
            # Reset original table information in the Insert, if necessary
            if unaliased:
                insert.into(table)

        return result.get_affected_rows()

    # update

    def update(
        self,
        table: TableSpec,
        values: Mapping[str, Any],
        where: Any = None,
        joins: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> int:
        """
        Update rows of `table`.

        Each join is a mapping with `name`, `on` and an optional `type`
        (defaults to Join.INNER).
        """
        sql = self._ensure_initialized()
        update = sql.update(table)
        update.set(values)

        if _is_customizer(where):
            where(update)
        elif where is not None:
            update.where(where)

        if joins:
            for join in joins:
                update.join(join["name"], join["on"], join.get("type", Join.INNER))

        return self._execute_update(update)

    def update_with(self, update: Update) -> int:
        self._ensure_initialized()
        return self._execute_update(update)

    def _execute_update(self, update: Update) -> int:
        table = update.get_raw_state("table")

        unaliased = is_aliased(table)
        if unaliased:
            update.table(unalias(table))

        try:
            with operation_context("update"):
                logger.debug("Executing UPDATE on %r", update.get_raw_state("table"))
                statement = self._sql.prepare_statement_for_sql_object(update)
                result = statement.execute()
        finally:
            if unaliased:
                update.table(table)

        return result.get_affected_rows()

    # delete

    def delete(self, table: TableSpec, where: Any) -> int:
        """
        Delete rows of `table` matching `where`.

        `where` is required; run delete_with(Delete(table)) to empty a table.
        """
        sql = self._ensure_initialized()
        if where is None:
            raise InvalidArgumentError("Predicate cannot be null")
        delete = sql.delete(table)

        if _is_customizer(where):
            where(delete)
        else:
            delete.where(where)

        return self._execute_delete(delete)

    def delete_with(self, delete: Delete) -> int:
        self._ensure_initialized()
        return self._execute_delete(delete)

    def _execute_delete(self, delete: Delete) -> int:
        with operation_context("delete"):
            logger.debug("Executing DELETE from %r", delete.get_raw_state("table"))
            statement = self._sql.prepare_statement_for_sql_object(delete)
            result = statement.execute()
        return result.get_affected_rows()


class BaseRepository(AbstractBaseRepository):
    """Concrete repository over an Adapter, ready to use after construction."""

    def __init__(self, adapter: Adapter, sql: Optional[Sql] = None) -> None:
        self._adapter = adapter
        # Sql object (factory for select, insert, update, delete)
        self._sql = sql if sql is not None else Sql(adapter)
        self.initialize()

