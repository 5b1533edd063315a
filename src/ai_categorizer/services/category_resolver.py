"""Category resolution for a single transaction.

Manual rules are operator-curated and always take precedence over the
classifier, but only when the rule's category still exists in the ledger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..clients.firefly import FireflyClient
from ..clients.openai_classifier import OpenAiClassifier
from ..config.manual_rules import ManualRule, find_manual_category
from ..config.settings import MANUAL_CATEGORY_PROMPT
from ..models.classification import ClassificationResult
from ..models.task import CancellationToken

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Picks a category from the manual rules or delegates to the classifier."""

    def __init__(
        self,
        ledger: FireflyClient,
        classifier: OpenAiClassifier,
        rules_provider: Callable[[], list[ManualRule]],
    ) -> None:
        """Initialize the resolver.

        Args:
            ledger: Source of the live category mapping
            classifier: Fallback natural-language classifier
            rules_provider: Returns the current ordered manual rule list
        """
        self.ledger = ledger
        self.classifier = classifier
        self.rules_provider = rules_provider

    def fetch_categories(self) -> dict[str, str]:
        """Fetch the ledger's current category mapping (name to id)."""
        return self.ledger.get_categories()

    def resolve(
        self,
        categories: dict[str, str],
        destination_name: str,
        description: str,
        token: CancellationToken | None = None,
    ) -> ClassificationResult:
        """Resolve the category of a transaction.

        Args:
            categories: Ledger category mapping fetched for this job
            destination_name: Counterparty of the transaction
            description: Free-text transaction description
            token: Cancellation token of the calling task

        Returns:
            ClassificationResult with the ledger's canonical category name,
            or category None when nothing matched
        """
        manual_category = find_manual_category(self.rules_provider(), description)

        if manual_category:
            canonical = {name.lower(): name for name in categories}.get(manual_category.lower())
            if canonical is not None:
                logger.info("Category found in manual configuration: %s", manual_category)
                return ClassificationResult(
                    category=canonical,
                    prompt=MANUAL_CATEGORY_PROMPT,
                    response=manual_category,
                )
            logger.warning(
                "Manual category '%s' does not exist in the ledger, asking the classifier",
                manual_category,
            )

        result = self.classifier.classify(list(categories), destination_name, description, token)
        if result.category is not None and result.category not in categories:
            logger.warning("Classifier picked unknown category '%s'", result.category)
            return ClassificationResult(None, result.prompt, result.response)
        return result
