"""Services package for business logic layer.

This package provides service classes that encapsulate the categorization
workflow and orchestrate the registry, the collaborators and the routes.
"""

from .category_resolver import CategoryResolver
from .event_stream import EventBroadcaster
from .executor_adapter import ExecutorAdapter
from .job_service import JobService
from .webhook_validator import validate_webhook
from .work_queue import WorkQueue

__all__ = [
    "CategoryResolver",
    "EventBroadcaster",
    "ExecutorAdapter",
    "JobService",
    "WorkQueue",
    "validate_webhook",
]
