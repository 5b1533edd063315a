"""
Job model for tracked categorization work.

This module provides the Job model class describing one transaction's
categorization from intake to completion.
"""

from __future__ import annotations

import copy
from typing import Any

from ..config.settings import ALL_STATUSES, STATUS_FINISHED, STATUS_QUEUED
from .base import BaseModel


class Job(BaseModel):
    """Job model representing a single transaction categorization.

    ``data`` starts with ``destinationName`` and ``description`` and gains
    ``category``, ``prompt`` and ``response`` once classification completes.
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the Job model with provided attributes.

        Args:
            **kwargs: Field values to set on the model instance.
        """
        super().__init__(**kwargs)

        self.status: str = kwargs.get("status", STATUS_QUEUED)
        self.data: dict[str, Any] = dict(kwargs.get("data") or {})

        if self.status not in ALL_STATUSES:
            raise ValueError(f"Unknown job status: {self.status}")

    @property
    def is_finished(self) -> bool:
        """Whether the job reached its terminal status."""
        return self.status == STATUS_FINISHED

    def to_dict(self, exclude: list[str] | None = None) -> dict[str, Any]:
        """Convert the job instance to a dictionary.

        ``data`` is deep-copied so snapshots handed to observers never alias
        the registry's own state.

        Args:
            exclude: List of field names to exclude from the dictionary.

        Returns:
            Dictionary representation of the job instance.
        """
        result = super().to_dict(exclude=exclude)
        if "data" in result:
            result["data"] = copy.deepcopy(result["data"])
        return result

    def __repr__(self) -> str:
        """Return a string representation of the job."""
        return f"<Job id={self.id} status={self.status}>"
