"""API blueprint for job snapshots and status."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/api/jobs")
def list_jobs():
    """Get every known job ordered by creation.

    Returns:
        JSON: List of jobs, each with id, created, status and data
    """
    job_service = current_app.extensions["ai_categorizer"]["job_service"]
    return jsonify(job_service.list_jobs())


@api_bp.route("/api/jobs/<job_id>")
def get_job(job_id: str):
    """Get a single job.

    Args:
        job_id: Unique job identifier from URL path

    Returns:
        JSON: The job

    Raises:
        JobNotFound: Rendered as 404 by the application error handler
    """
    job_service = current_app.extensions["ai_categorizer"]["job_service"]
    return jsonify(job_service.get_job(job_id))


@api_bp.route("/api/status")
def status():
    """Get queue and push channel status.

    Returns:
        JSON: {"jobs": int, "pending": int, "worker_running": bool, "observers": int}
    """
    services = current_app.extensions["ai_categorizer"]
    return jsonify(
        {
            "jobs": len(services["registry"]),
            "pending": services["work_queue"].pending,
            "worker_running": services["work_queue"].is_running,
            "observers": services["broadcaster"].subscriber_count,
        }
    )
