"""Client for the Firefly III REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..exceptions import LedgerError
from ..models.task import CancellationToken

logger = logging.getLogger(__name__)


class FireflyClient:
    """Reads categories from and writes categories to a Firefly III instance."""

    def __init__(
        self,
        base_url: str | None,
        personal_token: str | None,
        *,
        tag: str = "AI categorized",
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._personal_token = personal_token or ""
        self.tag = tag
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._personal_token}",
            "Accept": "application/vnd.api+json",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self._base_url:
            raise LedgerError(None, "FIREFLY_URL is not configured")

        try:
            response = self._client.request(
                method, f"{self._base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            raise LedgerError(None, str(e)) from e

        if response.is_error:
            raise LedgerError(response.status_code, response.text)
        return response

    def get_categories(self) -> dict[str, str]:
        """Fetch every category as a name to id mapping.

        Follows Firefly's pagination until the last page.

        Raises:
            LedgerError: On transport failure or a non-2xx response
        """
        categories: dict[str, str] = {}
        page = 1

        while True:
            body = self._request("GET", "/api/v1/categories", params={"page": page}).json()
            for category in body.get("data", []):
                categories[category["attributes"]["name"]] = str(category["id"])

            pagination = body.get("meta", {}).get("pagination", {})
            if page >= int(pagination.get("total_pages", 1) or 1):
                break
            page += 1

        logger.debug("Fetched %d categories from Firefly III", len(categories))
        return categories

    def set_category(
        self,
        transaction_id: Any,
        transactions: list[dict[str, Any]],
        category_id: str,
        token: CancellationToken | None = None,
    ) -> None:
        """Assign a category to every split of a transaction and tag it.

        Args:
            transaction_id: Firefly transaction group id
            transactions: The splits as received in the webhook
            category_id: Firefly id of the category to assign
            token: Cancellation token of the calling task

        Raises:
            LedgerError: On transport failure or a non-2xx response
            TaskCancelled: If the calling task was abandoned
        """
        body = {
            "apply_rules": True,
            "fire_webhooks": True,
            "transactions": [
                {
                    "transaction_journal_id": transaction.get("transaction_journal_id"),
                    "category_id": category_id,
                    "tags": [*(transaction.get("tags") or []), self.tag],
                }
                for transaction in transactions
            ],
        }

        if token is not None:
            token.raise_if_cancelled()

        self._request("PUT", f"/api/v1/transactions/{transaction_id}", json=body)
        logger.info("Set category %s on transaction %s", category_id, transaction_id)
