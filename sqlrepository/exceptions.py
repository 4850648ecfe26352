from __future__ import annotations


class RepositoryError(Exception):
    """Base class for errors raised by the repository layer itself."""


class RepositorySetupError(RepositoryError, RuntimeError):
    """
    Raised when a repository is used before it has been configured.

    Driver and SQL failures are not wrapped: they surface as the
    sqlalchemy.exc exceptions raised by the engine.
    """


class InvalidArgumentError(RepositoryError, ValueError):
    """Raised when a statement builder receives input it cannot express."""
