"""
Infrastructure Layer - Persistence, ingestion and caching for the status engine.

This module provides:
- Repository pattern for data access
- Row validation (ingestion) into domain entities
- SQLAlchemy-backed StatusDataStore
- Read-through cache in front of the store
"""

from .repositories import (
    BaseRepository,
    ProjectRepository,
    ActivityRepository,
    ProgressRecordRepository,
)
from .ingestion import parse_project, parse_activity, parse_progress_record
from .status_store import SqlAlchemyStatusStore
from .cache import CachedStatusStore

__all__ = [
    'BaseRepository',
    'ProjectRepository',
    'ActivityRepository',
    'ProgressRecordRepository',
    'parse_project',
    'parse_activity',
    'parse_progress_record',
    'SqlAlchemyStatusStore',
    'CachedStatusStore',
]
