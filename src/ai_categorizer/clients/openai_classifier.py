"""Natural-language transaction classifier backed by OpenAI chat completions."""

from __future__ import annotations

import logging

from openai import APIStatusError, OpenAI, OpenAIError

from ..config.settings import MATCH_MODE_EXACT, MATCH_MODE_SUBSTRING, MATCH_MODES
from ..exceptions import ClassifierError
from ..models.classification import ClassificationResult
from ..models.task import CancellationToken

logger = logging.getLogger(__name__)

PROMPT_TEMPLATES: dict[str, str] = {
    "en": (
        "Given i want to categorize transactions on my bank account into this categories: "
        "{categories}\n"
        'In which category would a transaction from "{destination_name}" with the subject '
        '"{description}" fall into?\n'
        "Just output the name of the category. Does not have to be a complete sentence."
    ),
    "it": (
        "Voglio classificare le transazioni del mio conto bancario in queste categorie: "
        "{categories}\n"
        'In quale categoria rientra una transazione verso "{destination_name}" con causale '
        '"{description}"?\n'
        "Rispondi solo con il nome della categoria. Non serve una frase completa."
    ),
}


class OpenAiClassifier:
    """Asks a chat model which of the ledger's categories fits a transaction.

    Args:
        api_key: OpenAI API key; the SDK falls back to OPENAI_API_KEY
        model: Chat model name
        match_mode: 'exact' accepts the guess only if it equals a category
            name; 'substring-contains' accepts the longest category name
            contained in the guess (case-insensitive)
        prompt_locale: Key of PROMPT_TEMPLATES
        timeout: Per-request timeout in seconds
        client: Preconfigured OpenAI client (tests)
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = "gpt-4o-mini",
        match_mode: str = MATCH_MODE_EXACT,
        prompt_locale: str = "en",
        timeout: float = 10.0,
        client: OpenAI | None = None,
    ) -> None:
        if match_mode not in MATCH_MODES:
            raise ValueError(f"Unsupported match mode: {match_mode}")
        if prompt_locale not in PROMPT_TEMPLATES:
            raise ValueError(f"Unsupported prompt locale: {prompt_locale}")

        self.model = model
        self.match_mode = match_mode
        self.prompt_template = PROMPT_TEMPLATES[prompt_locale]
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> OpenAI:
        # Built lazily so a missing key fails the job rather than app startup.
        if self._client is None:
            try:
                self._client = OpenAI(api_key=self._api_key, timeout=self._timeout)
            except OpenAIError as e:
                raise ClassifierError(None, str(e)) from e
        return self._client

    def generate_prompt(
        self, categories: list[str], destination_name: str, description: str
    ) -> str:
        return self.prompt_template.format(
            categories=", ".join(categories),
            destination_name=destination_name,
            description=description,
        )

    def match_guess(self, categories: list[str], guess: str) -> str | None:
        """Map the model's answer onto one of the supplied category names."""
        if self.match_mode == MATCH_MODE_SUBSTRING:
            lowered = guess.lower()
            contained = [name for name in categories if name and name.lower() in lowered]
            return max(contained, key=len) if contained else None

        return guess if guess in categories else None

    def classify(
        self,
        categories: list[str],
        destination_name: str,
        description: str,
        token: CancellationToken | None = None,
    ) -> ClassificationResult:
        """Classify a transaction into one of the given categories.

        Args:
            categories: Category names known to the ledger
            destination_name: Counterparty of the transaction
            description: Free-text transaction description
            token: Cancellation token of the calling task

        Returns:
            The result; ``category`` is None if the guess matched nothing

        Raises:
            ClassifierError: If the OpenAI request fails
            TaskCancelled: If the calling task was abandoned
        """
        prompt = self.generate_prompt(categories, destination_name, description)

        if token is not None:
            token.raise_if_cancelled()

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as e:
            logger.error("OpenAI returned %s: %s", e.status_code, e.response.text)
            raise ClassifierError(e.status_code, e.response.text) from e
        except OpenAIError as e:
            logger.error("OpenAI request failed: %s", e)
            raise ClassifierError(None, str(e)) from e

        response = completion.choices[0].message.content or ""
        guess = response.replace("\n", "").strip()
        category = self.match_guess(categories, guess)

        if category is None:
            logger.warning(
                "OpenAI could not classify the transaction. Prompt: %s OpenAI's guess: %s",
                prompt,
                guess,
            )

        return ClassificationResult(category=category, prompt=prompt, response=response)
