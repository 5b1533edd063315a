"""
Queued units of work.

A task carries exactly the inputs the worker needs to categorize one job, so
nothing is captured from the request that created it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import TaskCancelled


@dataclass(frozen=True)
class WebhookTransaction:
    """The fields of an accepted webhook that the pipeline needs."""

    transaction_id: Any
    transactions: list[dict[str, Any]]
    destination_name: str
    description: str


@dataclass(frozen=True)
class ClassificationTask:
    """A queued categorization of one ledger transaction."""

    job_id: str
    destination_name: str
    description: str
    transaction_id: Any
    transactions: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def for_job(cls, job_id: str, transaction: WebhookTransaction) -> ClassificationTask:
        """Build the task for a freshly created job."""
        return cls(
            job_id=job_id,
            destination_name=transaction.destination_name,
            description=transaction.description,
            transaction_id=transaction.transaction_id,
            transactions=transaction.transactions,
        )


class CancellationToken:
    """Cooperative cancellation flag shared by a task and its collaborator calls."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Mark the owning task as abandoned."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise TaskCancelled once the token has been cancelled."""
        if self._event.is_set():
            raise TaskCancelled("Task was abandoned after its timeout")
