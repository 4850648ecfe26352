"""
Core utilities shared by the repository layer.

This package provides:
- Logging configuration with context-enriched records
"""
from .logging import configure_logging, correlation_id_var, operation_context, operation_var

__all__ = [
    "configure_logging",
    "correlation_id_var",
    "operation_context",
    "operation_var",
]
