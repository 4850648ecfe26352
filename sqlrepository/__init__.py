"""
sqlrepository: a thin synchronous repository base over SQLAlchemy Core.
"""
from .db import Adapter, ResultSet
from .exceptions import InvalidArgumentError, RepositoryError, RepositorySetupError
from .repositories import AbstractBaseRepository, BaseRepository, BaseRepositoryInterface
from .sql import Delete, Insert, Join, Select, Sql, Update

__all__ = [
    "AbstractBaseRepository",
    "Adapter",
    "BaseRepository",
    "BaseRepositoryInterface",
    "Delete",
    "Insert",
    "InvalidArgumentError",
    "Join",
    "RepositoryError",
    "RepositorySetupError",
    "ResultSet",
    "Select",
    "Sql",
    "Update",
]
