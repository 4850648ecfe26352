"""
Repository layer for data access.

Repositories wrap an Adapter and a Sql statement factory and expose
select/insert/update/delete helpers. Subclass BaseRepository for each domain
area, or program against BaseRepositoryInterface.
"""
from .base import AbstractBaseRepository, BaseRepository
from .interface import BaseRepositoryInterface

__all__ = [
    "AbstractBaseRepository",
    "BaseRepository",
    "BaseRepositoryInterface",
]
