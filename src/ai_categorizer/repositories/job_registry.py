"""
In-memory job registry.

This module provides the store that owns every Job for the lifetime of the
process and notifies subscribers whenever a job is created or changed.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from ..config.settings import (
    EVENT_JOB_CREATED,
    EVENT_JOB_UPDATED,
    REGISTRY_EVENTS,
    STATUS_FINISHED,
    STATUS_IN_PROGRESS,
    STATUS_QUEUED,
)
from ..exceptions import InvalidJobTransition, JobNotFound
from ..models.job import Job
from ..models.task import CancellationToken

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], None]

# Allowed status moves; anything else is a regression or a skip.
_TRANSITIONS: dict[str, str] = {
    STATUS_QUEUED: STATUS_IN_PROGRESS,
    STATUS_IN_PROGRESS: STATUS_FINISHED,
}


class JobRegistry:
    """Thread-safe store of jobs with created/updated notifications.

    Every event payload has the shape ``{"job": {...}, "jobs": [...]}`` where
    ``jobs`` is the full snapshot ordered by creation. Payloads are plain
    dictionaries, so listeners may hand them to other threads freely.

    Events are emitted while the registry lock is held, which keeps the order
    observers see identical to the order in which changes were made.
    """

    def __init__(self, max_jobs: int = 0) -> None:
        """Initialize the registry.

        Args:
            max_jobs: Retention limit. When more jobs than this are stored the
                oldest finished jobs are evicted. 0 keeps every job.
        """
        self.max_jobs = max_jobs
        self._jobs: OrderedDict[str, Job] = OrderedDict()
        self._listeners: dict[str, list[Listener]] = {event: [] for event in REGISTRY_EVENTS}
        self._lock = threading.RLock()

    def on(self, event: str, listener: Listener) -> None:
        """Register a listener for a registry event.

        Args:
            event: 'job created' or 'job updated'
            listener: Callable receiving the event payload

        Raises:
            ValueError: If the event name is unknown
        """
        if event not in self._listeners:
            raise ValueError(f"Unknown registry event: {event}")
        with self._lock:
            self._listeners[event].append(listener)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Hold the registry lock so no event is emitted inside the block."""
        with self._lock:
            yield

    def get_jobs(self) -> list[dict[str, Any]]:
        """Get a snapshot of all jobs in insertion order."""
        with self._lock:
            return [job.to_dict() for job in self._jobs.values()]

    def get_job(self, job_id: str) -> dict[str, Any]:
        """Get a snapshot of a single job.

        Raises:
            JobNotFound: If no job has this id
        """
        with self._lock:
            return self._get(job_id).to_dict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs

    def create_job(self, data: dict[str, Any]) -> Job:
        """Create a new queued job.

        Args:
            data: Initial job data (destinationName, description)

        Returns:
            A detached copy of the created job
        """
        with self._lock:
            job = Job(data=data)
            while job.id in self._jobs:
                job = Job(data=data)
            self._jobs[job.id] = job
            self._evict()
            logger.info("Created job %s", job.id)
            self._emit(EVENT_JOB_CREATED, job)
            return Job.from_dict(job.to_dict())

    def set_job_in_progress(self, job_id: str, token: CancellationToken | None = None) -> None:
        """Move a queued job to in_progress."""
        self._transition(job_id, STATUS_IN_PROGRESS, token)

    def set_job_finished(self, job_id: str, token: CancellationToken | None = None) -> None:
        """Move an in-progress job to finished."""
        self._transition(job_id, STATUS_FINISHED, token)

    def update_job_data(
        self, job_id: str, data: dict[str, Any], token: CancellationToken | None = None
    ) -> None:
        """Replace a job's data wholesale.

        Args:
            job_id: Job ID to update
            data: The complete new data mapping
            token: Cancellation token of the mutating task; a cancelled token
                leaves the job untouched

        Raises:
            JobNotFound: If no job has this id
            TaskCancelled: If the token was cancelled
        """
        with self._lock:
            if token is not None:
                token.raise_if_cancelled()
            job = self._get(job_id)
            job.data = dict(data)
            logger.debug("Updated data of job %s", job_id)
            self._emit(EVENT_JOB_UPDATED, job)

    def _transition(self, job_id: str, target: str, token: CancellationToken | None) -> None:
        with self._lock:
            if token is not None:
                token.raise_if_cancelled()
            job = self._get(job_id)
            if _TRANSITIONS.get(job.status) != target:
                raise InvalidJobTransition(job_id, job.status, target)
            job.status = target
            logger.info("Job %s is now %s", job_id, target)
            self._emit(EVENT_JOB_UPDATED, job)

    def _get(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def _evict(self) -> None:
        if not self.max_jobs or len(self._jobs) <= self.max_jobs:
            return

        excess = len(self._jobs) - self.max_jobs
        for job_id in [jid for jid, job in self._jobs.items() if job.is_finished][:excess]:
            del self._jobs[job_id]
            logger.debug("Evicted finished job %s", job_id)

    def _emit(self, event: str, job: Job) -> None:
        payload = {"job": job.to_dict(), "jobs": [j.to_dict() for j in self._jobs.values()]}
        for listener in list(self._listeners[event]):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for '%s' failed", event)
