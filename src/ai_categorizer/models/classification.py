"""Outcome of resolving a transaction's category."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ClassificationResult:
    """The category picked for a transaction and how it was picked.

    ``category`` is None when nothing matched; that is a valid outcome, not
    an error.
    """

    category: str | None
    prompt: str
    response: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
