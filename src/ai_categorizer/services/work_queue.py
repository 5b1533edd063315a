"""Serialized work queue for categorization jobs.

A single worker thread drains the queue in submission order. Every task body
runs in its own thread so the worker can give up on it once the timeout has
elapsed; the abandoned task keeps running until its remote call returns, but
its cancellation token turns every further step into a no-op.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..clients.firefly import FireflyClient
from ..exceptions import QueueClosed, TaskCancelled, TaskTimeout
from ..models.task import CancellationToken, ClassificationTask
from ..repositories.job_registry import JobRegistry
from .category_resolver import CategoryResolver
from .executor_adapter import ExecutorAdapter

logger = logging.getLogger(__name__)

TASK_SUCCEEDED = "succeeded"
TASK_FAILED = "failed"
TASK_TIMED_OUT = "timed-out"

_STOP = object()


class WorkQueue:
    """FIFO queue executing at most one classification task at a time."""

    def __init__(
        self,
        registry: JobRegistry,
        resolver: CategoryResolver,
        ledger: FireflyClient,
        executor: ExecutorAdapter | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the work queue.

        Args:
            registry: Registry whose jobs the tasks drive
            resolver: Category resolver used for every task
            ledger: Ledger client used for the category write-back
            executor: Thread factory for the worker and task bodies
            timeout: Per-task execution budget in seconds
        """
        self.registry = registry
        self.resolver = resolver
        self.ledger = ledger
        self.executor = executor or ExecutorAdapter()
        self.timeout = timeout
        self._queue: queue.Queue = queue.Queue()
        self._worker: threading.Thread | None = None
        self._stopping = threading.Event()
        self._intake_lock = threading.Lock()

    @property
    def pending(self) -> int:
        """Number of tasks waiting to run."""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """Start the worker thread if it is not running yet."""
        if self.is_running:
            return
        self._stopping.clear()
        self._worker = self.executor.submit_job(self._drain, name="worker")
        logger.info("Work queue started (timeout: %gs)", self.timeout)

    def stop(self, timeout: float | None = None) -> None:
        """Stop accepting tasks and let the worker exit after its current task.

        Tasks still waiting are not run; their jobs stay queued.
        """
        with self._intake_lock:
            self._stopping.set()
            self._queue.put(_STOP)
        if self._worker is not None:
            self._worker.join(timeout)
        logger.info("Work queue stopped")

    @contextmanager
    def accepting(self) -> Iterator[None]:
        """Hold intake open for the block so stop() cannot interleave with it.

        Raises:
            QueueClosed: If the queue is shutting down
        """
        with self._intake_lock:
            if self._stopping.is_set():
                raise QueueClosed("Work queue is shutting down")
            yield

    def submit(self, task: ClassificationTask) -> None:
        """Append a task to the queue.

        Raises:
            QueueClosed: If the queue is shutting down
        """
        if self._stopping.is_set():
            raise QueueClosed("Work queue is shutting down")
        self._queue.put(task)
        logger.debug("Queued job %s (%d pending)", task.job_id, self.pending)

    def join(self) -> None:
        """Block until every submitted task has completed, failed or timed out."""
        self._queue.join()

    def _drain(self) -> None:
        while True:
            task = self._queue.get()
            try:
                if task is _STOP or self._stopping.is_set():
                    logger.info("Worker exiting")
                    return
                self.run_task(task)
            finally:
                self._queue.task_done()

    def run_task(self, task: ClassificationTask) -> str:
        """Run one task to completion, failure or timeout.

        Returns:
            TASK_SUCCEEDED, TASK_FAILED or TASK_TIMED_OUT
        """
        logger.info("Job started: %s", task.job_id)
        token = CancellationToken()
        outcome = {"state": TASK_FAILED}

        thread = self.executor.submit_job(
            self._execute, task, token, outcome, name=f"job-{task.job_id[:8]}"
        )
        thread.join(self.timeout)

        if thread.is_alive():
            token.cancel()
            logger.error("Job timeout: %s", TaskTimeout(task.job_id, self.timeout))
            return TASK_TIMED_OUT

        return outcome["state"]

    def _execute(self, task: ClassificationTask, token: CancellationToken, outcome: dict) -> None:
        try:
            self.process(task, token)
        except TaskCancelled:
            logger.info("Ignoring late progress of abandoned job %s", task.job_id)
        except Exception:
            logger.exception("Job error: %s", task.job_id)
        else:
            outcome["state"] = TASK_SUCCEEDED
            logger.info("Job success: %s", task.job_id)

    def process(self, task: ClassificationTask, token: CancellationToken) -> None:
        """Categorize one transaction and record every step on its job."""
        job_id = task.job_id
        self.registry.set_job_in_progress(job_id, token)

        categories = self.resolver.fetch_categories()
        result = self.resolver.resolve(categories, task.destination_name, task.description, token)

        data = self.registry.get_job(job_id)["data"]
        data.update(result.to_dict())
        self.registry.update_job_data(job_id, data, token)

        if result.category is not None:
            self.ledger.set_category(
                task.transaction_id, task.transactions, categories[result.category], token
            )

        self.registry.set_job_finished(job_id, token)
