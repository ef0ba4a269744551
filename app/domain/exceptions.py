"""
Domain Exceptions for Project Status Determination.

Custom exceptions enforcing business rules:
- Input shape validation at ingestion
- Manual status transition table
- Per-project persistence failures
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Project Exceptions
# =============================================================================

class ProjectNotFoundError(DomainError):
    """Raised when a project cannot be found."""

    def __init__(self, project_id):
        message = f"Project with id '{project_id}' not found"
        super().__init__(message, code="PROJECT_NOT_FOUND")
        self.project_id = project_id


# =============================================================================
# Status Exceptions
# =============================================================================

class InvalidStatusTransitionError(DomainError):
    """Raised when a manual status change is not in the transition table."""

    def __init__(self, current: str, requested: str, allowed=None):
        allowed = sorted(allowed or [])
        message = (
            f"No such transition: '{current}' -> '{requested}'. "
            f"Valid targets: {allowed}"
        )
        super().__init__(message, code="INVALID_STATUS_TRANSITION")
        self.current = current
        self.requested = requested
        self.allowed = allowed


# =============================================================================
# Ingestion Exceptions
# =============================================================================

class RecordValidationError(DomainError):
    """Raised when a raw project, activity or progress row is malformed."""

    def __init__(self, record_type: str, field: str, message: str):
        super().__init__(
            f"Invalid {record_type} '{field}': {message}",
            code="RECORD_VALIDATION_ERROR"
        )
        self.record_type = record_type
        self.field = field


# =============================================================================
# Persistence Exceptions
# =============================================================================

class StatusPersistenceError(DomainError):
    """Raised when writing a computed status back to the store fails."""

    def __init__(self, project_id, reason: str):
        message = f"Failed to persist status for project '{project_id}': {reason}"
        super().__init__(message, code="STATUS_PERSISTENCE_ERROR")
        self.project_id = project_id
        self.reason = reason
