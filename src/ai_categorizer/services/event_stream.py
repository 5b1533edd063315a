"""Server-Sent Events push channel for job state.

Each connected observer owns a bounded queue. Publishing never blocks: when an
observer falls behind, events are dropped for that observer only.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from collections.abc import Iterator
from typing import Any

from ..config.settings import EVENT_JOB_CREATED, EVENT_JOB_UPDATED, EVENT_JOBS
from ..repositories.job_registry import JobRegistry

logger = logging.getLogger(__name__)

# SSE headers to reduce proxy buffering and keep connections alive.
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_CLOSE = object()


def format_sse(event: str, data: Any) -> str:
    """Encode one event in the text/event-stream wire format."""
    return f"event: {event}\ndata: {json.dumps(data, default=str)}\n\n"


class EventBroadcaster:
    """Fans registry events out to every connected observer."""

    def __init__(
        self,
        registry: JobRegistry,
        queue_size: int = 100,
        keepalive: float = 15.0,
    ) -> None:
        self.registry = registry
        self.queue_size = queue_size
        self.keepalive = keepalive
        self._subscribers: set[queue.Queue] = set()
        self._lock = threading.Lock()

        registry.on(EVENT_JOB_CREATED, lambda payload: self.publish(EVENT_JOB_CREATED, payload))
        registry.on(EVENT_JOB_UPDATED, lambda payload: self.publish(EVENT_JOB_UPDATED, payload))

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> queue.Queue:
        """Register a new observer and queue the initial jobs snapshot for it."""
        subscriber: queue.Queue = queue.Queue(maxsize=self.queue_size)
        # Registered while the registry is locked so no event falls between
        # the snapshot and the first live event.
        with self.registry.atomic():
            subscriber.put_nowait((EVENT_JOBS, self.registry.get_jobs()))
            with self._lock:
                self._subscribers.add(subscriber)
        logger.info("Observer connected (%d total)", self.subscriber_count)
        return subscriber

    def unsubscribe(self, subscriber: queue.Queue) -> None:
        with self._lock:
            self._subscribers.discard(subscriber)
        logger.info("Observer disconnected (%d total)", self.subscriber_count)

    def publish(self, event: str, payload: Any) -> None:
        """Queue an event for every observer without blocking."""
        with self._lock:
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber.put_nowait((event, payload))
            except queue.Full:
                logger.warning("Dropping '%s' event for a slow observer", event)

    def close(self) -> None:
        """End every open stream."""
        with self._lock:
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            try:
                subscriber.put_nowait((_CLOSE, None))
            except queue.Full:
                self.unsubscribe(subscriber)

    def stream(self, subscriber: queue.Queue) -> Iterator[str]:
        """Yield SSE frames for a subscriber until it disconnects."""
        try:
            while True:
                try:
                    event, payload = subscriber.get(timeout=self.keepalive)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                if event is _CLOSE:
                    return
                yield format_sse(event, payload)
        finally:
            self.unsubscribe(subscriber)
