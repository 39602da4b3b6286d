"""Database layer for the pet hotel reservation service."""

from .base import Base, TimestampMixin
from .models_sqlalchemy import Reservation
from .session import (
    engine,
    AsyncSessionLocal,
    create_engine,
    create_session_factory,
    init_db,
    drop_db,
    close_db,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Models
    "Reservation",
    # Session
    "engine",
    "AsyncSessionLocal",
    "create_engine",
    "create_session_factory",
    "init_db",
    "drop_db",
    "close_db",
]
