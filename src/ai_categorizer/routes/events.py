"""Events blueprint for the real-time push channel."""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, stream_with_context

from ..services import EventBroadcaster
from ..services.event_stream import SSE_HEADERS

logger = logging.getLogger(__name__)

events_bp = Blueprint("events", __name__)


@events_bp.route("/events")
def events():
    """Stream job state changes as Server-Sent Events.

    Returns:
        text/event-stream with the events:
            - jobs: full job list, sent once on connect
            - job created: {"job": {...}, "jobs": [...]}
            - job updated: {"job": {...}, "jobs": [...]}

    Note:
        Delivery is best-effort. An observer that stops reading has events
        dropped instead of slowing down the worker.
    """
    broadcaster: EventBroadcaster = current_app.extensions["ai_categorizer"]["broadcaster"]
    subscriber = broadcaster.subscribe()

    return Response(
        stream_with_context(broadcaster.stream(subscriber)),
        mimetype="text/event-stream",
        headers=SSE_HEADERS,
    )
