"""
Ingestion - Validates raw project, activity and progress rows.

Rows arrive from the store, from imports or from API payloads, often with
the dashboard's spreadsheet-style column names ("Activity Name",
"Input Type", ...). Malformed enum values and negative quantities are
rejected here so the status engine only ever sees well-formed input.
"""
from datetime import date, datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.domain.entities import (
    Activity,
    ActivityTiming,
    InputType,
    ProgressRecord,
    Project,
    ProjectStatus,
)
from app.domain.exceptions import RecordValidationError
from app.domain.services.status_catalog import parse_status


def _parse_date(value: Any) -> Optional[date]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


class _Row(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore', from_attributes=True)


class ProjectRow(_Row):
    """Raw project row."""
    id: int
    code: str = Field(..., min_length=1, validation_alias=AliasChoices('code', 'project_code', 'Project Code'))
    name: str = Field('', validation_alias=AliasChoices('name', 'project_name', 'Project Name'))
    start_date: Optional[date] = Field(None, validation_alias=AliasChoices('start_date', 'project_start_date'))
    end_date: Optional[date] = Field(None, validation_alias=AliasChoices('end_date', 'project_completion_date'))
    status: ProjectStatus = Field(
        ProjectStatus.UPCOMING,
        validation_alias=AliasChoices('status', 'project_status', 'Project Status'),
    )

    @field_validator('code')
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("project code must not be blank")
        return v

    @field_validator('name', mode='before')
    @classmethod
    def default_name(cls, v):
        return v or ''

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def parse_dates(cls, v):
        return _parse_date(v)

    @field_validator('status', mode='before')
    @classmethod
    def normalize(cls, v):
        if v in (None, ''):
            return ProjectStatus.UPCOMING
        return parse_status(v)

    def to_entity(self) -> Project:
        return Project(
            id=self.id,
            code=self.code,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            status=self.status,
        )


class ActivityRow(_Row):
    """Raw activity (BOQ) row."""
    id: Optional[int] = None
    project_code: str = Field(..., min_length=1, validation_alias=AliasChoices('project_code', 'Project Code'))
    name: str = Field('', validation_alias=AliasChoices('name', 'activity_name', 'Activity Name'))
    timing: ActivityTiming = Field(..., validation_alias=AliasChoices('timing', 'activity_timing', 'Activity Timing'))
    planned_units: float = Field(0.0, ge=0)
    actual_units: float = Field(0.0, ge=0)

    @field_validator('name', mode='before')
    @classmethod
    def default_name(cls, v):
        return v or ''

    @field_validator('timing', mode='before')
    @classmethod
    def normalize_timing(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('planned_units', 'actual_units', mode='before')
    @classmethod
    def default_units(cls, v):
        return 0.0 if v in (None, '') else v

    def to_entity(self) -> Activity:
        return Activity(
            id=self.id,
            project_code=self.project_code,
            name=self.name,
            timing=self.timing,
            planned_units=self.planned_units,
            actual_units=self.actual_units,
        )


class ProgressRecordRow(_Row):
    """Raw progress (KPI) row."""
    id: Optional[int] = None
    project_code: str = Field(..., min_length=1, validation_alias=AliasChoices('project_code', 'Project Code', 'Project Full Code'))
    activity_name: str = Field('', validation_alias=AliasChoices('activity_name', 'Activity Name'))
    input_type: InputType = Field(..., validation_alias=AliasChoices('input_type', 'Input Type'))
    quantity: float = Field(..., ge=0, validation_alias=AliasChoices('quantity', 'Quantity'))
    activity_date: Optional[date] = Field(None, validation_alias=AliasChoices('activity_date', 'Activity Date'))

    @field_validator('activity_name', mode='before')
    @classmethod
    def default_name(cls, v):
        return v or ''

    @field_validator('input_type', mode='before')
    @classmethod
    def normalize_input_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('quantity', mode='before')
    @classmethod
    def parse_quantity(cls, v):
        # Spreadsheet exports carry thousands separators ("1,250")
        if isinstance(v, str):
            v = v.replace(',', '').strip()
            if not v:
                raise ValueError("quantity must not be blank")
        return v

    @field_validator('activity_date', mode='before')
    @classmethod
    def parse_date(cls, v):
        return _parse_date(v)

    def to_entity(self) -> ProgressRecord:
        return ProgressRecord(
            id=self.id,
            project_code=self.project_code,
            activity_name=self.activity_name,
            input_type=self.input_type,
            quantity=self.quantity,
            activity_date=self.activity_date,
        )


RowT = TypeVar('RowT', bound=_Row)


def _validate(row_class: Type[RowT], record_type: str, raw: Any) -> RowT:
    try:
        if isinstance(raw, dict):
            return row_class.model_validate(raw)
        return row_class.model_validate(raw, from_attributes=True)
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error.get('loc', ())) or record_type
        raise RecordValidationError(record_type, field, error.get('msg', str(e))) from e


def parse_project(raw: Any) -> Project:
    """Validate a raw project row (dict or ORM object) into a Project."""
    return _validate(ProjectRow, 'project', raw).to_entity()


def parse_activity(raw: Any) -> Activity:
    """Validate a raw activity row (dict or ORM object) into an Activity."""
    return _validate(ActivityRow, 'activity', raw).to_entity()


def parse_progress_record(raw: Any) -> ProgressRecord:
    """Validate a raw progress row (dict or ORM object) into a ProgressRecord."""
    return _validate(ProgressRecordRow, 'progress record', raw).to_entity()
