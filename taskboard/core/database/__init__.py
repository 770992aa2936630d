"""Core database package: declarative base, mixins and a thin repository."""

from taskboard.core.database.base import (
    NAMING_CONVENTION,
    Base,
    IntegerPKMixin,
    TimestampedBase,
    TimestampMixin,
    UTCDateTime,
)
from taskboard.core.database.repository import BaseRepository

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "IntegerPKMixin",
    "TimestampMixin",
    "TimestampedBase",
    "UTCDateTime",
]
