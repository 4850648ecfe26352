from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import Engine, Executable, Insert, create_engine
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import CursorResult, Dialect, RootTransaction
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StatementResult:
    """
    Outcome of one executed statement.

    Rows of a query are fetched eagerly so the shared connection is free for
    the next statement as soon as execute() returns.
    """

    def __init__(
        self,
        affected_rows: int,
        rows: Optional[List[Dict[str, Any]]] = None,
        generated_value: Any = None,
    ) -> None:
        self._affected_rows = affected_rows
        self._rows = rows
        self._generated_value = generated_value

    @classmethod
    def from_cursor(cls, result: CursorResult, generated_value: Any = None) -> "StatementResult":
        rows = None
        if result.returns_rows:
            rows = [dict(row) for row in result.mappings().all()]
        return cls(result.rowcount, rows, generated_value)

    def get_affected_rows(self) -> int:
        return self._affected_rows

    def get_generated_value(self) -> Any:
        return self._generated_value

    def is_query_result(self) -> bool:
        return self._rows is not None

    def count(self) -> int:
        return len(self._rows or [])

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._rows or [])


class Connection:
    """
    Lazily opened SQLAlchemy connection owned by an Adapter.

    Outside of an explicit transaction every statement is committed as soon
    as it has executed.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._resource: Optional[SAConnection] = None
        self._transaction: Optional[RootTransaction] = None
        self._last_generated_value: Any = None

    def connect(self) -> "Connection":
        if self._resource is None:
            self._resource = self._engine.connect()
            logger.debug("Opened connection to %s", self._engine.url.render_as_string(hide_password=True))
        return self

    def is_connected(self) -> bool:
        return self._resource is not None and not self._resource.closed

    def disconnect(self) -> None:
        if self._resource is not None:
            self._resource.close()
            logger.debug("Closed connection")
        self._resource = None
        self._transaction = None

    def get_resource(self) -> SAConnection:
        """Return the underlying SQLAlchemy connection, opening it if needed."""
        self.connect()
        assert self._resource is not None
        return self._resource

    def begin_transaction(self) -> "Connection":
        self._transaction = self.get_resource().begin()
        logger.debug("Transaction started")
        return self

    def in_transaction(self) -> bool:
        return self._transaction is not None and self._transaction.is_active

    def commit(self) -> "Connection":
        if self._transaction is not None:
            self._transaction.commit()
            self._transaction = None
            logger.debug("Transaction committed")
        return self

    def rollback(self) -> "Connection":
        if self._transaction is not None:
            self._transaction.rollback()
            self._transaction = None
            logger.debug("Transaction rolled back")
        return self

    def execute(self, executable: Executable, params: Optional[Dict[str, Any]] = None) -> StatementResult:
        resource = self.get_resource()
        explicit = self.in_transaction()
        try:
            cursor = resource.execute(executable, params or {})
            generated = None
            if isinstance(executable, Insert):
                generated = cursor.lastrowid
                self._last_generated_value = generated
            result = StatementResult.from_cursor(cursor, generated)
        except Exception:
            if not explicit:
                try:
                    resource.rollback()
                except SQLAlchemyError:
                    # the statement error is the one reported
                    logger.warning("Rollback after failed statement also failed", exc_info=True)
            raise
        if not explicit:
            resource.commit()
        return result

    def get_last_generated_value(self) -> Any:
        return self._last_generated_value


class Statement:
    """An executable bound to the adapter that will run it."""

    def __init__(self, adapter: "Adapter", executable: Executable) -> None:
        self._adapter = adapter
        self._executable = executable

    def get_executable(self) -> Executable:
        return self._executable

    def get_sql(self) -> str:
        return str(self._executable.compile(dialect=self._adapter.get_dialect()))

    def execute(self, params: Optional[Dict[str, Any]] = None) -> StatementResult:
        return self._adapter.get_connection().execute(self._executable, params)


class Adapter:
    """
    Database adapter: a SQLAlchemy Engine plus the single connection the
    repository layer executes on.

    The adapter is owned by the caller; repositories only reference it.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._connection: Optional[Connection] = None

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "Adapter":
        """Create an adapter on a new Engine for the given SQLAlchemy URL."""
        return cls(create_engine(url, **engine_kwargs))

    def get_engine(self) -> Engine:
        return self._engine

    def get_dialect(self) -> Dialect:
        return self._engine.dialect

    def get_driver_name(self) -> str:
        return self._engine.dialect.name

    def get_connection(self) -> Connection:
        if self._connection is None:
            self._connection = Connection(self._engine)
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.disconnect()
            self._connection = None
