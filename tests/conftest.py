"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from ai_categorizer.clients.firefly import FireflyClient
from ai_categorizer.clients.openai_classifier import OpenAiClassifier
from ai_categorizer.models.classification import ClassificationResult
from ai_categorizer.repositories.job_registry import JobRegistry

LEDGER_CATEGORIES = {"Shopping": "1", "Groceries": "2", "Travel": "3"}


@pytest.fixture
def rules_path(tmp_path: Path) -> Path:
    """Provide a manual categories file with a single Amazon rule."""
    path = tmp_path / "manual_categories.json"
    path.write_text(
        json.dumps({"categories": [{"transaction_contains": "Amazon", "category": "Shopping"}]}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_ledger() -> Mock:
    """Ledger double returning a fixed category mapping."""
    ledger = Mock(spec=FireflyClient)
    ledger.get_categories.return_value = dict(LEDGER_CATEGORIES)
    return ledger


@pytest.fixture
def fake_classifier() -> Mock:
    """Classifier double that always answers 'Travel'."""
    classifier = Mock(spec=OpenAiClassifier)
    classifier.classify.return_value = ClassificationResult(
        category="Travel", prompt="Which category?", response="Travel"
    )
    return classifier


@pytest.fixture
def registry() -> JobRegistry:
    """Fresh registry without a retention limit."""
    return JobRegistry()


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Factory for valid STORE_TRANSACTION webhook payloads.

    Keyword arguments override fields of the first transaction split.
    """

    def _make(**overrides: Any) -> dict[str, Any]:
        transaction = {
            "transaction_journal_id": "77",
            "type": "withdrawal",
            "category_id": None,
            "description": "Paid Amazon.it order",
            "destination_name": "Amazon EU",
            "tags": [],
        }
        transaction.update(overrides)
        return {
            "trigger": "STORE_TRANSACTION",
            "response": "TRANSACTIONS",
            "content": {"id": 42, "transactions": [transaction]},
        }

    return _make


# ============================================================================
# Flask App Fixtures
# ============================================================================

@pytest.fixture
def app_config_overrides() -> dict[str, Any]:
    """Temporary config overrides for tests."""
    return {}


@pytest.fixture
def app(app_config_overrides, rules_path, fake_ledger, fake_classifier):
    """Create Flask app for testing with test doubles for the collaborators."""
    from ai_categorizer import create_app, shutdown

    test_config = {
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
        "MANUAL_CATEGORIES_PATH": str(rules_path),
        "JOB_TIMEOUT_SECONDS": 5,
        "EVENT_KEEPALIVE_SECONDS": 0.1,
    }
    test_config.update(app_config_overrides)

    app = create_app(test_config, ledger=fake_ledger, classifier=fake_classifier)

    yield app

    shutdown(app, timeout=5)


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def services(app) -> dict[str, Any]:
    """The service objects wired into the app."""
    from ai_categorizer import EXTENSION_KEY

    return app.extensions[EXTENSION_KEY]
