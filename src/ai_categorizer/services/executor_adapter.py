"""Task execution adapter for background work."""

from __future__ import annotations

from collections.abc import Callable
from threading import Thread
from typing import Any


class ExecutorAdapter:
    """Execution adapter for background task submission."""

    def __init__(self, name_prefix: str = "categorizer") -> None:
        self.name_prefix = name_prefix

    def submit_job(self, func: Callable[..., Any], *args: Any, name: str | None = None) -> Thread:
        """Submit a background job using a daemon thread."""
        thread = Thread(
            target=func,
            args=args,
            name=f"{self.name_prefix}-{name}" if name else None,
            daemon=True,
        )
        thread.start()
        return thread
