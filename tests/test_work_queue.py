"""Tests for WorkQueue."""

from __future__ import annotations

import threading
import time

import pytest

from ai_categorizer.config.manual_rules import ManualRule
from ai_categorizer.exceptions import ClassifierError, LedgerError, QueueClosed
from ai_categorizer.models.classification import ClassificationResult
from ai_categorizer.services.category_resolver import CategoryResolver
from ai_categorizer.services.executor_adapter import ExecutorAdapter
from ai_categorizer.services.job_service import JobService
from ai_categorizer.services.work_queue import (
    TASK_FAILED,
    TASK_SUCCEEDED,
    TASK_TIMED_OUT,
    WorkQueue,
)


class RecordingExecutor(ExecutorAdapter):
    """Executor that remembers every thread it started."""

    def __init__(self) -> None:
        super().__init__("test")
        self.threads: list[threading.Thread] = []

    def submit_job(self, func, *args, name=None):
        thread = super().submit_job(func, *args, name=name)
        self.threads.append(thread)
        return thread


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def rules():
    return [ManualRule("Amazon", "Shopping")]


@pytest.fixture
def work_queue(registry, fake_ledger, fake_classifier, rules, executor):
    resolver = CategoryResolver(fake_ledger, fake_classifier, lambda: rules)
    queue = WorkQueue(registry, resolver, fake_ledger, executor=executor, timeout=5)
    queue.start()
    yield queue
    queue.stop(timeout=5)


@pytest.fixture
def job_service(registry, work_queue):
    return JobService(registry, work_queue)


@pytest.fixture
def status_log(registry):
    """Record (job id, status) for every registry event in emission order."""
    log: list[tuple[str, str]] = []
    registry.on("job created", lambda p: log.append((p["job"]["id"], p["job"]["status"])))
    registry.on("job updated", lambda p: log.append((p["job"]["id"], p["job"]["status"])))
    return log


class TestProcessing:
    """Test cases for task execution."""

    def test_manual_category_is_written_back(
        self, job_service, work_queue, registry, fake_ledger, fake_classifier, make_payload
    ):
        """Test the full pipeline for a manual rule match."""
        payload = make_payload()
        job = job_service.handle_webhook(payload)
        work_queue.join()

        stored = registry.get_job(job.id)
        assert stored["status"] == "finished"
        assert stored["data"] == {
            "destinationName": "Amazon EU",
            "description": "Paid Amazon.it order",
            "category": "Shopping",
            "prompt": "Fetched from manual categories configuration",
            "response": "Shopping",
        }
        fake_classifier.classify.assert_not_called()
        args = fake_ledger.set_category.call_args.args
        assert args[:3] == (42, payload["content"]["transactions"], "1")

    def test_classifier_category_is_written_back(
        self, job_service, work_queue, registry, fake_ledger, make_payload
    ):
        """Test the pipeline when the classifier picks the category."""
        job = job_service.handle_webhook(
            make_payload(description="Train ticket", destination_name="Trenitalia")
        )
        work_queue.join()

        stored = registry.get_job(job.id)
        assert stored["status"] == "finished"
        assert stored["data"]["category"] == "Travel"
        assert fake_ledger.set_category.call_args.args[2] == "3"

    def test_unclassified_job_finishes_without_write_back(
        self, job_service, work_queue, registry, fake_ledger, fake_classifier, make_payload
    ):
        """Test that an unknown guess finishes the job and leaves the ledger alone."""
        fake_classifier.classify.return_value = ClassificationResult("Gadgets", "p", "Gadgets")

        job = job_service.handle_webhook(make_payload(description="Something odd"))
        work_queue.join()

        stored = registry.get_job(job.id)
        assert stored["status"] == "finished"
        assert stored["data"]["category"] is None
        fake_ledger.set_category.assert_not_called()

    def test_status_sequence_never_skips(self, job_service, work_queue, status_log, make_payload):
        """Test that each job passes queued, in_progress, finished in order."""
        job = job_service.handle_webhook(make_payload())
        work_queue.join()

        statuses = [status for job_id, status in status_log if job_id == job.id]
        assert statuses == ["queued", "in_progress", "in_progress", "finished"]


class TestOrdering:
    """Test cases for serialized FIFO execution."""

    def test_jobs_run_in_submission_order(
        self, job_service, work_queue, status_log, make_payload
    ):
        """Test that job 2 starts only after job 1 finished."""
        first = job_service.handle_webhook(make_payload(description="Amazon one"))
        second = job_service.handle_webhook(make_payload(description="Amazon two"))
        work_queue.join()

        first_finished = status_log.index((first.id, "finished"))
        second_started = status_log.index((second.id, "in_progress"))
        assert first_finished < second_started

    def test_at_most_one_task_runs(
        self, job_service, work_queue, fake_classifier, make_payload
    ):
        """Test that classifier calls never overlap."""
        running = []
        overlaps = []

        def classify(*args):
            running.append(1)
            if len(running) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            running.pop()
            return ClassificationResult("Travel", "p", "Travel")

        fake_classifier.classify.side_effect = classify
        for index in range(5):
            job_service.handle_webhook(make_payload(description=f"Ticket {index}"))
        work_queue.join()

        assert fake_classifier.classify.call_count == 5
        assert overlaps == []


class TestFailures:
    """Test cases for failure isolation."""

    def test_classifier_failure_leaves_job_in_progress(
        self, job_service, work_queue, registry, fake_classifier, make_payload
    ):
        """Test that a failed task keeps its last status and later jobs still run."""
        fake_classifier.classify.side_effect = [
            ClassifierError(500, "server error"),
            ClassificationResult("Travel", "p", "Travel"),
        ]

        failed = job_service.handle_webhook(make_payload(description="Ticket A"))
        succeeded = job_service.handle_webhook(make_payload(description="Ticket B"))
        work_queue.join()

        assert registry.get_job(failed.id)["status"] == "in_progress"
        assert registry.get_job(succeeded.id)["status"] == "finished"

    def test_ledger_fetch_failure_leaves_job_in_progress(
        self, job_service, work_queue, registry, fake_ledger, make_payload
    ):
        """Test that a category fetch failure fails only that job."""
        fake_ledger.get_categories.side_effect = LedgerError(503, "down")

        job = job_service.handle_webhook(make_payload())
        work_queue.join()

        assert registry.get_job(job.id)["status"] == "in_progress"
        fake_ledger.set_category.assert_not_called()

    def test_write_back_failure_keeps_resolved_data(
        self, job_service, work_queue, registry, fake_ledger, make_payload
    ):
        """Test that a failed write-back leaves the job in_progress with its category."""
        fake_ledger.set_category.side_effect = LedgerError(422, "invalid")

        job = job_service.handle_webhook(make_payload())
        work_queue.join()

        stored = registry.get_job(job.id)
        assert stored["status"] == "in_progress"
        assert stored["data"]["category"] == "Shopping"

    def test_run_task_reports_outcome(self, work_queue, registry, fake_ledger, make_payload):
        """Test that run_task returns succeeded or failed."""
        from ai_categorizer.models.task import ClassificationTask
        from ai_categorizer.services.webhook_validator import validate_webhook

        transaction = validate_webhook(make_payload())
        ok = registry.create_job({})
        assert work_queue.run_task(ClassificationTask.for_job(ok.id, transaction)) == TASK_SUCCEEDED

        fake_ledger.get_categories.side_effect = LedgerError(None, "offline")
        bad = registry.create_job({})
        assert work_queue.run_task(ClassificationTask.for_job(bad.id, transaction)) == TASK_FAILED


class TestTimeout:
    """Test cases for the per-task timeout."""

    def test_timed_out_job_is_abandoned(
        self, registry, fake_ledger, fake_classifier, executor, make_payload
    ):
        """Test that a slow task times out and its late result is ignored."""
        release = threading.Event()

        calls = {"count": 0}

        def classify(*args):
            calls["count"] += 1
            if calls["count"] == 1:
                release.wait(5)
            return ClassificationResult("Travel", "p", "Travel")

        fake_classifier.classify.side_effect = classify

        resolver = CategoryResolver(fake_ledger, fake_classifier, lambda: [])
        queue = WorkQueue(registry, resolver, fake_ledger, executor=executor, timeout=0.2)
        service = JobService(registry, queue)
        queue.start()
        try:
            slow = service.handle_webhook(make_payload(description="Slow one"))
            fast = service.handle_webhook(make_payload(description="Fast one"))
            queue.join()

            assert registry.get_job(slow.id)["status"] == "in_progress"
            assert registry.get_job(fast.id)["status"] == "finished"

            release.set()
            for thread in executor.threads:
                if thread.name != "test-worker":
                    thread.join(5)

            stored = registry.get_job(slow.id)
            assert stored["status"] == "in_progress"
            assert "category" not in stored["data"]
            assert fake_ledger.set_category.call_count == 1
        finally:
            release.set()
            queue.stop(timeout=5)

    def test_run_task_reports_timeout(self, registry, fake_ledger, fake_classifier, make_payload):
        """Test that run_task returns timed-out when the budget is exceeded."""
        from ai_categorizer.models.task import ClassificationTask
        from ai_categorizer.services.webhook_validator import validate_webhook

        release = threading.Event()
        fake_ledger.get_categories.side_effect = lambda: release.wait(5) and {}
        resolver = CategoryResolver(fake_ledger, fake_classifier, lambda: [])
        queue = WorkQueue(registry, resolver, fake_ledger, timeout=0.1)
        job = registry.create_job({})

        try:
            task = ClassificationTask.for_job(job.id, validate_webhook(make_payload()))
            assert queue.run_task(task) == TASK_TIMED_OUT
        finally:
            release.set()


class TestLifecycle:
    """Test cases for starting and stopping."""

    def test_submit_after_stop_is_rejected(self, registry, fake_ledger, fake_classifier):
        """Test that a stopped queue accepts no more tasks."""
        from ai_categorizer.models.task import ClassificationTask

        resolver = CategoryResolver(fake_ledger, fake_classifier, lambda: [])
        queue = WorkQueue(registry, resolver, fake_ledger)
        queue.start()
        queue.stop(timeout=5)

        assert not queue.is_running
        with pytest.raises(QueueClosed):
            queue.submit(ClassificationTask("id", "dest", "desc", 1, []))

    def test_start_is_idempotent(self, work_queue):
        """Test that starting twice keeps a single worker."""
        worker = work_queue._worker
        work_queue.start()

        assert work_queue._worker is worker

    def test_stop_leaves_waiting_jobs_queued(
        self, registry, fake_ledger, fake_classifier, executor, make_payload
    ):
        """Test that the worker exits after its current task without running the rest."""
        started = threading.Event()
        release = threading.Event()

        def classify(*args):
            started.set()
            release.wait(5)
            return ClassificationResult("Travel", "p", "Travel")

        fake_classifier.classify.side_effect = classify
        resolver = CategoryResolver(fake_ledger, fake_classifier, lambda: [])
        queue = WorkQueue(registry, resolver, fake_ledger, executor=executor, timeout=5)
        service = JobService(registry, queue)
        queue.start()
        worker = queue._worker
        try:
            jobs = [
                service.handle_webhook(make_payload(description=f"Ticket {index}"))
                for index in range(4)
            ]
            assert started.wait(5)

            queue.stop(timeout=0)
            release.set()
            worker.join(5)

            assert not queue.is_running
            assert [registry.get_job(job.id)["status"] for job in jobs] == [
                "finished",
                "queued",
                "queued",
                "queued",
            ]
            assert fake_classifier.classify.call_count == 1
        finally:
            release.set()
            queue.stop(timeout=5)

    def test_accepting_after_stop_raises(self, registry, fake_ledger, fake_classifier):
        """Test that intake is refused once the queue is stopping."""
        resolver = CategoryResolver(fake_ledger, fake_classifier, lambda: [])
        queue = WorkQueue(registry, resolver, fake_ledger)
        queue.stop(timeout=0)

        with pytest.raises(QueueClosed):
            with queue.accepting():
                pass
