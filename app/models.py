"""
Database models and SQLAlchemy setup for the Project Status Engine.

Progress records join to activities by activity name, not by foreign key,
mirroring how the records are captured in the field.
"""
from datetime import datetime, timezone
from sqlalchemy import (
    create_engine, Column, Integer, String, Float, Boolean,
    DateTime, Date, Text, ForeignKey, Index
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship

Base = declarative_base()


def create_session_factory(database_url: str, create_tables: bool = False):
    """Build a session factory for a database URL, optionally creating tables."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    db_engine = create_engine(database_url, connect_args=connect_args)
    if create_tables:
        Base.metadata.create_all(bind=db_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    """
    Top-level project entity.
    status is written by the status engine unless manually overridden.
    """
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Status engine output
    status = Column(String(30), default="upcoming", nullable=False, index=True)
    status_confidence = Column(Integer, nullable=True)  # 0-100
    status_reason = Column(Text, nullable=True)
    status_updated_at = Column(DateTime, nullable=True)
    kpi_added = Column(Boolean, default=False)  # Has at least one planned record

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    status_changes = relationship(
        "StatusChangeLog", back_populates="project", cascade="all, delete-orphan"
    )


class Activity(Base):
    """BOQ activity of a project, tagged with the phase it belongs to."""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    project_code = Column(String(50), nullable=False, index=True)
    name = Column(String(500), nullable=False, default="")
    timing = Column(String(30), nullable=False, default="post-commencement")  # pre-commencement, post-commencement, post-completion
    # Legacy unit totals; not used by the canonical status path
    planned_units = Column(Float, default=0.0)
    actual_units = Column(Float, default=0.0)
    created_at = Column(DateTime, default=utcnow)


class ProgressRecord(Base):
    """Planned or actual progress entry (KPI) reported against an activity name."""
    __tablename__ = "progress_records"

    id = Column(Integer, primary_key=True, index=True)
    project_code = Column(String(50), nullable=False, index=True)
    activity_name = Column(String(500), nullable=False, default="")
    input_type = Column(String(10), nullable=False)  # planned, actual
    quantity = Column(Float, nullable=False, default=0.0)
    activity_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index('ix_progress_records_project_type', 'project_code', 'input_type'),
    )


class StatusChangeLog(Base):
    """Audit trail of project status changes (automatic and manual)."""
    __tablename__ = "status_change_log"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False, index=True)
    old_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=False)
    confidence = Column(Integer, nullable=True)
    reason = Column(Text, nullable=True)
    source = Column(String(20), default="automatic")  # automatic, manual
    changed_at = Column(DateTime, default=utcnow, index=True)

    project = relationship("Project", back_populates="status_changes")
