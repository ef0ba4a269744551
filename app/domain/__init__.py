"""
Domain Layer - Core business entities and services for project status determination.

This module contains:
- entities/: Projects, activities, progress records and classification results
- services/: Phase classification, record matching, progress aggregation,
  the status state machine and the manual transition table
"""

from .entities import (
    Project, Activity, ProgressRecord,
    ProjectStatus, ActivityTiming, InputType,
    ActivityProgress, PhaseAggregate, StatusResult, RecomputeResult,
)

__all__ = [
    'Project', 'Activity', 'ProgressRecord',
    'ProjectStatus', 'ActivityTiming', 'InputType',
    'ActivityProgress', 'PhaseAggregate', 'StatusResult', 'RecomputeResult',
]
