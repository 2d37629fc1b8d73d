"""Core module - Base classes and utilities"""

from .models import Base, Record
from .database import DatabaseManager, db_manager
from .exceptions import (
    FeedException,
    SourceException,
    AggregationError,
    PersistenceError,
    FeedQueryError,
    ConfigurationError,
)
from .cache import SnapshotCache, snapshot_cache

__all__ = [
    "Base",
    "Record",
    "DatabaseManager",
    "db_manager",
    "FeedException",
    "SourceException",
    "AggregationError",
    "PersistenceError",
    "FeedQueryError",
    "ConfigurationError",
    "SnapshotCache",
    "snapshot_cache",
]
