"""Application factory for Flask app creation."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from flask import Flask, abort, jsonify

from .clients import FireflyClient, OpenAiClassifier
from .config import get_config, load_manual_rules
from .exceptions import InvalidWebhookPayload, JobNotFound, QueueClosed
from .repositories import JobRegistry
from .routes import api_bp, events_bp, pages_bp, webhook_bp
from .services import CategoryResolver, EventBroadcaster, ExecutorAdapter, JobService, WorkQueue

logger = logging.getLogger(__name__)

EXTENSION_KEY = "ai_categorizer"


def create_app(
    test_config: Mapping[str, Any] | None = None,
    *,
    ledger: FireflyClient | None = None,
    classifier: OpenAiClassifier | None = None,
    executor: ExecutorAdapter | None = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        test_config: Settings applied on top of the environment configuration
        ledger: Ledger client to use instead of one built from the config
        classifier: Classifier to use instead of one built from the config
        executor: Thread factory for the work queue
    """
    app = Flask(__name__)

    config_class = get_config()
    app.config.from_object(config_class)
    if test_config:
        app.config.update(test_config)

    errors = config_class.validate()
    if errors:
        logger.warning("Configuration warnings: %s", errors)

    ledger = ledger or FireflyClient(
        app.config["FIREFLY_URL"],
        app.config["FIREFLY_PERSONAL_TOKEN"],
        tag=app.config["FIREFLY_TAG"],
        timeout=app.config["HTTP_TIMEOUT_SECONDS"],
    )
    classifier = classifier or OpenAiClassifier(
        app.config["OPENAI_API_KEY"],
        model=app.config["OPENAI_MODEL"],
        match_mode=app.config["CLASSIFIER_MATCH_MODE"],
        prompt_locale=app.config["CLASSIFIER_PROMPT_LOCALE"],
        timeout=app.config["HTTP_TIMEOUT_SECONDS"],
    )

    rules_path = Path(app.config["MANUAL_CATEGORIES_PATH"])
    registry = JobRegistry(max_jobs=app.config["JOB_HISTORY_LIMIT"])
    resolver = CategoryResolver(ledger, classifier, lambda: load_manual_rules(rules_path))
    work_queue = WorkQueue(
        registry,
        resolver,
        ledger,
        executor=executor,
        timeout=app.config["JOB_TIMEOUT_SECONDS"],
    )
    broadcaster = EventBroadcaster(
        registry,
        queue_size=app.config["EVENT_QUEUE_SIZE"],
        keepalive=app.config["EVENT_KEEPALIVE_SECONDS"],
    )

    app.extensions[EXTENSION_KEY] = {
        "registry": registry,
        "work_queue": work_queue,
        "broadcaster": broadcaster,
        "job_service": JobService(registry, work_queue),
        "shutdown_event": threading.Event(),
    }

    app.register_blueprint(webhook_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(pages_bp)

    @app.before_request
    def before_request():
        """Reject new requests once shutdown has started."""
        if app.extensions[EXTENSION_KEY]["shutdown_event"].is_set():
            abort(503, "Server is shutting down")

    @app.errorhandler(InvalidWebhookPayload)
    def invalid_webhook(error):
        """Handle rejected webhook payloads."""
        logger.warning("Webhook rejected: %s", error)
        return str(error), 400

    @app.errorhandler(JobNotFound)
    def job_not_found(error):
        """Handle unknown job ids."""
        return jsonify({"error": str(error)}), 404

    @app.errorhandler(QueueClosed)
    def queue_closed(error):
        """Handle webhooks that raced the start of shutdown."""
        logger.warning("Webhook refused: %s", error)
        return "Server is shutting down", 503

    work_queue.start()

    logger.info("Application created and configured")
    return app


def shutdown(app: Flask, timeout: float | None = None) -> None:
    """Stop intake, close observer streams and let the worker finish its task."""
    services = app.extensions[EXTENSION_KEY]
    services["shutdown_event"].set()
    services["broadcaster"].close()
    logger.info("Waiting for the running job to complete (timeout: %ss)...", timeout)
    services["work_queue"].stop(timeout)


def register_signal_handlers(app: Flask) -> None:
    """Register signal handlers for graceful shutdown."""

    def signal_handler(signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info("Received signal %d, initiating shutdown...", signum)
        shutdown(app, timeout=app.config["JOB_TIMEOUT_SECONDS"])
        raise SystemExit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


__all__ = ["create_app", "register_signal_handlers", "shutdown", "EXTENSION_KEY"]
