"""
Database package initializer exposing the adapter, result set, configuration
and engine management.
"""

from .adapter import Adapter, Connection, Statement, StatementResult
from .config import Settings, get_settings
from .result_set import ResultSet, RowObject
from .session import dispose_engine, get_adapter, get_engine

__all__ = [
    "Adapter",
    "Connection",
    "ResultSet",
    "RowObject",
    "Settings",
    "Statement",
    "StatementResult",
    "dispose_engine",
    "get_adapter",
    "get_engine",
    "get_settings",
]
