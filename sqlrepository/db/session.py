from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Engine, create_engine

from .adapter import Adapter
from .config import Settings, get_settings

logger = logging.getLogger(__name__)

_ENGINE: Engine | None = None


def _ensure_engine_initialized(settings: Optional[Settings] = None) -> None:
    """
    Lazily initialize the process-wide Engine.
    """
    global _ENGINE
    if _ENGINE is None:
        settings = settings or get_settings()
        _ENGINE = create_engine(
            settings.sync_database_url,
            echo=settings.SQL_ECHO,
            pool_pre_ping=settings.POOL_PRE_PING,
        )
        logger.info("Created database engine for dialect %s", _ENGINE.dialect.name)


# PUBLIC_INTERFACE
def get_engine(settings: Optional[Settings] = None) -> Engine:
    """Return the global Engine instance, creating it from settings on first use."""
    _ensure_engine_initialized(settings)
    assert _ENGINE is not None
    return _ENGINE


# PUBLIC_INTERFACE
def get_adapter(settings: Optional[Settings] = None) -> Adapter:
    """
    Return a new Adapter on the global Engine.

    Each adapter owns its own connection, so hand one adapter to each
    thread that runs repositories.
    """
    return Adapter(get_engine(settings))


# PUBLIC_INTERFACE
def dispose_engine() -> None:
    """Dispose of the global Engine and its pool; the next call recreates it."""
    global _ENGINE
    if _ENGINE is not None:
        _ENGINE.dispose()
        _ENGINE = None
