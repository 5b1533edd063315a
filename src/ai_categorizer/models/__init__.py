"""Models package for in-memory entities and queued work."""

from .base import BaseModel
from .classification import ClassificationResult
from .job import Job
from .task import CancellationToken, ClassificationTask, WebhookTransaction

__all__ = [
    "BaseModel",
    "ClassificationResult",
    "Job",
    "CancellationToken",
    "ClassificationTask",
    "WebhookTransaction",
]
