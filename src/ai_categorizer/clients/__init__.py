"""Clients for the remote collaborators: the ledger and the classifier."""

from .firefly import FireflyClient
from .openai_classifier import PROMPT_TEMPLATES, OpenAiClassifier

__all__ = ["FireflyClient", "OpenAiClassifier", "PROMPT_TEMPLATES"]
