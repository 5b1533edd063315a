"""Repository package for job state ownership."""

from .job_registry import JobRegistry

__all__ = ["JobRegistry"]
