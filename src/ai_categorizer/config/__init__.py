"""
Configuration module for the transaction categorizer.

This package provides centralized configuration management with environment variable
support and the manual category rule table.
"""

from .manual_rules import ManualRule, find_manual_category, load_manual_rules
from .settings import (
    ALL_STATUSES,
    EVENT_JOB_CREATED,
    EVENT_JOB_UPDATED,
    EVENT_JOBS,
    MANUAL_CATEGORY_PROMPT,
    MATCH_MODE_EXACT,
    MATCH_MODE_SUBSTRING,
    MATCH_MODES,
    PROMPT_LOCALES,
    REGISTRY_EVENTS,
    STATUS_FINISHED,
    STATUS_IN_PROGRESS,
    STATUS_QUEUED,
    Config,
    get_config,
)

__all__ = [
    "Config",
    "get_config",
    "ManualRule",
    "find_manual_category",
    "load_manual_rules",
    "STATUS_QUEUED",
    "STATUS_IN_PROGRESS",
    "STATUS_FINISHED",
    "ALL_STATUSES",
    "EVENT_JOB_CREATED",
    "EVENT_JOB_UPDATED",
    "EVENT_JOBS",
    "REGISTRY_EVENTS",
    "MATCH_MODE_EXACT",
    "MATCH_MODE_SUBSTRING",
    "MATCH_MODES",
    "PROMPT_LOCALES",
    "MANUAL_CATEGORY_PROMPT",
]
