"""Validation of inbound Firefly III webhook payloads.

Checks run in a fixed order and the first failure wins, so the caller always
learns about the earliest problem in the payload.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..exceptions import InvalidWebhookPayload
from ..models.task import WebhookTransaction

EXPECTED_TRIGGER = "STORE_TRANSACTION"
EXPECTED_RESPONSE = "TRANSACTIONS"
EXPECTED_TYPE = "withdrawal"


def validate_webhook(payload: Any) -> WebhookTransaction:
    """Validate a webhook payload and extract what the pipeline needs.

    Args:
        payload: Decoded JSON body of the webhook request

    Returns:
        The ledger transaction id, its splits, and the first split's
        destination name and description

    Raises:
        InvalidWebhookPayload: On the first violated rule
    """
    if not isinstance(payload, Mapping):
        raise InvalidWebhookPayload("Request body must be a JSON object")

    if payload.get("trigger") != EXPECTED_TRIGGER:
        raise InvalidWebhookPayload(
            f"trigger is not {EXPECTED_TRIGGER}. Request will not be processed"
        )

    if payload.get("response") != EXPECTED_RESPONSE:
        raise InvalidWebhookPayload(
            f"response is not {EXPECTED_RESPONSE}. Request will not be processed"
        )

    content = payload.get("content")
    if not isinstance(content, Mapping) or not content.get("id"):
        raise InvalidWebhookPayload("Missing content.id")

    transactions = content.get("transactions")
    if (
        not isinstance(transactions, Sequence)
        or isinstance(transactions, (str, bytes))
        or len(transactions) == 0
    ):
        raise InvalidWebhookPayload("No transactions are available in content.transactions")

    for index, split in enumerate(transactions):
        if not isinstance(split, Mapping):
            raise InvalidWebhookPayload(f"content.transactions[{index}] must be an object")

    first = transactions[0]

    if first.get("type") != EXPECTED_TYPE:
        raise InvalidWebhookPayload(
            f"content.transactions[0].type has to be '{EXPECTED_TYPE}'. "
            "Transaction will be ignored."
        )

    if first.get("category_id") is not None:
        raise InvalidWebhookPayload(
            "content.transactions[0].category_id is already set. Transaction will be ignored."
        )

    if not first.get("description"):
        raise InvalidWebhookPayload("Missing content.transactions[0].description")

    if not first.get("destination_name"):
        raise InvalidWebhookPayload("Missing content.transactions[0].destination_name")

    return WebhookTransaction(
        transaction_id=content["id"],
        transactions=[dict(split) for split in transactions],
        destination_name=str(first["destination_name"]),
        description=str(first["description"]),
    )
