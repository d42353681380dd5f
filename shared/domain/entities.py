"""
Core Entity Base

Foundation shared by every mutable domain entity:
- Assignment-time validation through pydantic
- Creation and modification timestamps
- Explicit business-rule validation hook
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


class AbstractEntity(BaseModel, ABC):
    """
    Base abstract entity class providing lifecycle timestamps.

    Entities are mutable, but every assignment is re-validated so an entity
    can never hold a value its field declarations reject.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=False,
        arbitrary_types_allowed=True,
    )

    created_at: datetime = Field(
        default_factory=utcnow, description="Entity creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=utcnow, description="Last update timestamp"
    )

    @abstractmethod
    def validate_business_rules(self) -> bool:
        """
        Validate entity-specific business rules.

        Returns:
            bool: True if all business rules are satisfied

        Raises:
            DomainException: If business rules are violated
        """

    def mark_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()
