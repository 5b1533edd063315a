"""Exception hierarchy for the categorizer.

Intake errors are reported to the webhook caller. Everything raised once a
job has been queued stays inside the worker and is only visible through the
job's last recorded status.
"""

from __future__ import annotations


class CategorizerError(Exception):
    """Base exception for all categorizer errors."""

    pass


class InvalidWebhookPayload(CategorizerError):
    """Raised when an inbound webhook payload fails validation.

    The message names the violated rule and is returned to the caller
    verbatim with HTTP 400.
    """

    pass


class CollaboratorFailure(CategorizerError):
    """Raised when a remote collaborator call fails.

    Attributes:
        status_code: HTTP status returned by the collaborator, if any
        body: Response body or error text
    """

    service_name: str = "collaborator"

    def __init__(self, status_code: int | None, body: str | None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Error while communicating with {self.service_name}: {status_code} - {body}"
        )


class LedgerError(CollaboratorFailure):
    """Raised when the ledger (Firefly III) rejects or fails a request."""

    service_name = "Firefly III"


class ClassifierError(CollaboratorFailure):
    """Raised when the classifier service fails."""

    service_name = "OpenAI"


class ManualRulesError(CategorizerError):
    """Raised when the manual categories file cannot be parsed."""

    pass


class JobNotFound(CategorizerError, KeyError):
    """Raised when an operation references an unknown job id."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")

    def __str__(self) -> str:
        return f"Job not found: {self.job_id}"


class InvalidJobTransition(CategorizerError):
    """Raised when a status change would move a job backwards or skip a state."""

    def __init__(self, job_id: str, current: str, target: str) -> None:
        self.job_id = job_id
        self.current = current
        self.target = target
        super().__init__(f"Job {job_id} cannot move from '{current}' to '{target}'")


class TaskTimeout(CategorizerError):
    """Raised when a task exceeds its execution budget."""

    def __init__(self, job_id: str, timeout: float) -> None:
        self.job_id = job_id
        self.timeout = timeout
        super().__init__(f"Job {job_id} timed out after {timeout:g}s")


class QueueClosed(CategorizerError):
    """Raised when work is submitted after the queue started shutting down."""

    pass


class TaskCancelled(CategorizerError):
    """Raised inside an abandoned task when it tries to make further progress."""

    pass
