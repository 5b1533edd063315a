"""
Manual category rules.

Rules live in a JSON file shaped like::

    {"categories": [{"transaction_contains": "Amazon", "category": "Shopping"}]}

The file is re-read for every job so operators can edit it without a restart.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ManualRulesError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManualRule:
    """A single substring-to-category override."""

    transaction_contains: str
    category: str

    def matches(self, description: str) -> bool:
        """Check whether the rule's substring occurs in the description (case-insensitive)."""
        return self.transaction_contains.lower() in description.lower()


def load_manual_rules(path: Path) -> list[ManualRule]:
    """Load the ordered manual rule list from a JSON file.

    Args:
        path: Path to the manual categories file

    Returns:
        Rules in file order. A missing file yields an empty list.

    Raises:
        ManualRulesError: If the file is not valid JSON or has the wrong shape
    """
    if not path.exists():
        logger.info("No manual categories file at %s", path)
        return []

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ManualRulesError(f"Error reading or parsing {path}: {e}") from e

    entries = raw.get("categories") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        raise ManualRulesError(f"{path} must contain a 'categories' list")

    rules: list[ManualRule] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ManualRulesError(f"{path}: categories[{index}] must be an object")
        contains = entry.get("transaction_contains")
        category = entry.get("category")
        if not contains or not category:
            raise ManualRulesError(
                f"{path}: categories[{index}] needs 'transaction_contains' and 'category'"
            )
        rules.append(ManualRule(str(contains), str(category)))

    logger.debug("Read %d manual categories from %s", len(rules), path)
    return rules


def find_manual_category(rules: list[ManualRule], description: str) -> str | None:
    """Return the category of the first rule matching the description, or None."""
    for rule in rules:
        if rule.matches(description):
            return rule.category
    return None
