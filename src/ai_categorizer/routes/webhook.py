"""Webhook blueprint for Firefly III transaction notifications."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from ..services import JobService

logger = logging.getLogger(__name__)

webhook_bp = Blueprint("webhook", __name__)


def get_job_service() -> JobService:
    return current_app.extensions["ai_categorizer"]["job_service"]


@webhook_bp.route("/webhook", methods=["POST"])
def webhook():
    """Accept a STORE_TRANSACTION webhook and queue its categorization.

    Returns:
        Text:
            - 200 "Queued" once the job has been created
            - 400 with the violated rule when the payload is rejected

    Note:
        Processing is asynchronous. The outcome of a queued job is only
        observable through /events and /api/jobs, never through this response.
    """
    logger.info("Webhook triggered")

    payload = request.get_json(silent=True)
    get_job_service().handle_webhook(payload)

    return "Queued", 200
