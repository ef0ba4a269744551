"""
Repository implementations for data access layer.
"""
from .base_repository import BaseRepository
from .project_repository import ProjectRepository
from .activity_repository import ActivityRepository
from .progress_record_repository import ProgressRecordRepository

__all__ = [
    'BaseRepository',
    'ProjectRepository',
    'ActivityRepository',
    'ProgressRecordRepository',
]
