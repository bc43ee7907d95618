"""
KeywordIntentClassifier — deterministic substring matching, no network.

Two passes, first match wins in both:
  1. every example phrase of the intent table, in table order;
  2. a fixed chain of keyword groups.

Matching is on the lowercased raw text: no tokenisation and no accent
folding, so "chambre" also matches inside "chambres".  The order of both
passes decides ties and must not be rearranged.
"""

from collections.abc import Sequence

from src.content import load_intents
from src.domain.intent import FALLBACK_INTENT, IntentClassifier, IntentDefinition

_KEYWORD_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("greeting", ("bonjour", "salut", "bonsoir")),
    ("make_reservation", ("réserv",)),
    ("check_availability", ("disponib", "chambre libre")),
    ("wifi_info", ("wifi", "internet")),
    ("parking_info", ("parking", "voiture")),
    ("check_in_time", ("check-in", "arrivée")),
    ("check_out_time", ("check-out", "départ")),
    ("thanks", ("merci",)),
    ("goodbye", ("au revoir", "bye")),
    ("complaint", ("plainte", "problème")),
    ("loyalty_status", ("fidélité", "vip", "score")),
    ("contact_reception", ("réception", "humain", "appeler")),
    ("amenities", ("service", "piscine", "restaurant")),
    ("room_types", ("chambre", "type", "suite")),
    ("directions", ("adresse", "venir", "itinéraire")),
    ("help_menu", ("aide", "menu", "option")),
]


def _contains_any(text: str, needles: Sequence[str]) -> bool:
    return any(n in text for n in needles)


def find_intent(text: str, intents: Sequence[IntentDefinition]) -> str:
    lower = text.lower().strip()

    for intent in intents:
        if _contains_any(lower, [e.lower() for e in intent.examples]):
            return intent.name

    for name, keywords in _KEYWORD_RULES:
        if _contains_any(lower, keywords):
            return name

    return FALLBACK_INTENT


class KeywordIntentClassifier(IntentClassifier):

    def __init__(self, intents: Sequence[IntentDefinition] | None = None):
        self._intents = intents if intents is not None else load_intents()

    async def classify(self, message: str) -> str:
        return find_intent(message, self._intents)
