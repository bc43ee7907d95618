"""
IntentClassifier port — understands what the chat user is asking for.

The classifier only names an intent.  Choosing and filling in the reply
is done by plain code (src.domain.response) so that every classifier,
keyword-based or LLM-backed, produces replies from the same table.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

FALLBACK_INTENT = "fallback"


@dataclass(frozen=True)
class IntentDefinition:
    """One row of the static intent table."""
    name: str
    examples: tuple[str, ...]
    responses: tuple[str, ...]
    requires_auth: bool = False


def intent_names(intents: Sequence[IntentDefinition]) -> list[str]:
    return [i.name for i in intents]


def get_intent(intents: Sequence[IntentDefinition], name: str) -> IntentDefinition | None:
    for intent in intents:
        if intent.name == name:
            return intent
    return None


class IntentClassifier(ABC):
    """
    Port: map free text to exactly one intent name from the table.

    Implementations may use ordered keyword matching
    (KeywordIntentClassifier) or an LLM (ClaudeIntentClassifier).
    Both must satisfy the same contract: the returned name is always
    present in the table, and "fallback" is used when nothing matches.
    """

    @abstractmethod
    async def classify(self, message: str) -> str:
        """Return the intent name for a single user message."""
        ...
