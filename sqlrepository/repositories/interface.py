"""
Repository Interface (BaseRepositoryInterface)

The capability set consumers program against instead of the concrete base
repository: adapter access plus the four CRUD helpers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from sqlrepository.db.adapter import Adapter
from sqlrepository.db.result_set import ResultSet
from sqlrepository.sql.predicate import TableSpec


class BaseRepositoryInterface(ABC):

    @abstractmethod
    def get_adapter(self) -> Adapter:
        """Return the adapter the repository executes on."""

    @abstractmethod
    def select(self, table: TableSpec, where: Any = None) -> ResultSet:
        """
        Run a SELECT against `table`.

        Args:
            table: table name, {alias: table} mapping or SQLAlchemy table
            where: None, a filter expression, or a callable receiving the Select builder

        Returns:
            ResultSet with the matching rows
        """

    @abstractmethod
    def insert(self, table: TableSpec, values: Mapping[str, Any]) -> int:
        """Insert one row; returns the affected row count."""

    @abstractmethod
    def update(self, table: TableSpec, values: Mapping[str, Any], where: Any = None) -> int:
        """Update matching rows; returns the affected row count."""

    @abstractmethod
    def delete(self, table: TableSpec, where: Any) -> int:
        """Delete rows matching `where` (required); returns the affected row count."""
