"""
Base model class for in-memory entities.

This module provides a base model class with common functionality for all tracked entities.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import uuid4

T = TypeVar("T", bound="BaseModel")


class BaseModel:
    """Base model class with common functionality for all tracked entities.

    This class provides the identity and creation timestamp shared by every
    entity, plus dictionary serialization for the push channel and the API.
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the model with provided attributes.

        Args:
            **kwargs: Field values to set on the model instance.
        """
        self.id: str = kwargs.get("id") or str(uuid4())
        self.created: datetime = kwargs.get("created") or datetime.now(timezone.utc)

    def to_dict(self, exclude: list[str] | None = None) -> dict[str, Any]:
        """Convert the model instance to a dictionary.

        Args:
            exclude: List of field names to exclude from the dictionary.

        Returns:
            Dictionary representation of the model instance.
        """
        exclude = exclude or []
        result = {}

        for attr_name, attr_value in vars(self).items():
            if attr_name.startswith("_") or attr_name in exclude:
                continue
            if isinstance(attr_value, datetime):
                result[attr_name] = attr_value.isoformat()
            else:
                result[attr_name] = attr_value

        return result

    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        """Create a model instance from a dictionary.

        Args:
            data: Dictionary containing field values.

        Returns:
            Model instance populated with data from the dictionary.
        """
        data = dict(data)
        if "created" in data and isinstance(data["created"], str):
            data["created"] = datetime.fromisoformat(data["created"])

        return cls(**data)

    def __repr__(self) -> str:
        """Return a string representation of the model."""
        class_name = self.__class__.__name__
        return f"<{class_name} id={self.id}>"

    def __eq__(self, other: object) -> bool:
        """Check equality based on id."""
        if not isinstance(other, BaseModel):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Return hash based on id."""
        return hash(self.id)
