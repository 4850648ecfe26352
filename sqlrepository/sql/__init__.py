"""
Statement factory and mutable statement builders compiling to SQLAlchemy Core.
"""

from .abstract import AbstractSql
from .delete import Delete
from .insert import Insert
from .join import Join
from .predicate import build_predicate, resolve_table
from .select import Select
from .sql import Sql
from .update import Update

__all__ = [
    "AbstractSql",
    "Delete",
    "Insert",
    "Join",
    "Select",
    "Sql",
    "Update",
    "build_predicate",
    "resolve_table",
]
