"""
Base Repository - Abstract repository pattern implementation.

Provides common lookup, transaction and query helpers for all entities.
"""
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Type
from sqlalchemy.orm import Session

from app.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common data access operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages
    """

    def __init__(self, session: Session, model_class: Type[T]):
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy database session
            model_class: The model class this repository manages
        """
        self.session = session
        self.model_class = model_class

    def get_by_id(self, entity_id: int) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Args:
            entity_id: Primary key value

        Returns:
            The entity if found, None otherwise
        """
        return self.session.get(self.model_class, entity_id)

    def commit(self) -> None:
        """Commit the current transaction."""
        self.session.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.session.rollback()

    @abstractmethod
    def exists(self, **criteria) -> bool:
        """
        Check if an entity matching the criteria exists.

        Args:
            **criteria: Field-value pairs to match

        Returns:
            True if entity exists, False otherwise
        """
        pass

    def _exists(self, **criteria) -> bool:
        query = self.session.query(self.model_class)
        for field, value in criteria.items():
            query = query.filter(getattr(self.model_class, field) == value)
        return query.first() is not None
