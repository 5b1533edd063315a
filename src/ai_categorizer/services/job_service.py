"""Job service for webhook intake and job lookups.

This service encapsulates the intake workflow and orchestrates the registry
and the work queue on behalf of the routes.
"""

from __future__ import annotations

import logging
from typing import Any

from ..models.job import Job
from ..models.task import ClassificationTask
from ..repositories.job_registry import JobRegistry
from .webhook_validator import validate_webhook
from .work_queue import WorkQueue

logger = logging.getLogger(__name__)


class JobService:
    """Service for turning webhooks into queued jobs."""

    def __init__(self, registry: JobRegistry, work_queue: WorkQueue) -> None:
        """Initialize the job service.

        Args:
            registry: Registry that owns the jobs
            work_queue: Queue executing the classification tasks
        """
        self.registry = registry
        self.work_queue = work_queue

    def handle_webhook(self, payload: Any) -> Job:
        """Validate a webhook payload, create its job and queue the task.

        Args:
            payload: Decoded JSON body of the webhook

        Returns:
            The created job, status 'queued'

        Raises:
            InvalidWebhookPayload: If the payload fails validation; no job is
                created in that case
            QueueClosed: If the work queue is shutting down; no job is
                created in that case
        """
        transaction = validate_webhook(payload)

        with self.work_queue.accepting():
            job = self.registry.create_job(
                {
                    "destinationName": transaction.destination_name,
                    "description": transaction.description,
                }
            )
            self.work_queue.submit(ClassificationTask.for_job(job.id, transaction))

        logger.info(
            "Queued job %s for transaction %s (%s)",
            job.id,
            transaction.transaction_id,
            transaction.destination_name,
        )
        return job

    def list_jobs(self) -> list[dict[str, Any]]:
        """List all jobs ordered by creation."""
        return self.registry.get_jobs()

    def get_job(self, job_id: str) -> dict[str, Any]:
        """Get a single job.

        Raises:
            JobNotFound: If no job has this id
        """
        return self.registry.get_job(job_id)
