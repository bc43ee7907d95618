"""
Reply composition for the chat assistant.

Classifier → intent name → code picks a template and fills placeholders.
Pure functions: the random source is injected so tests can pin the pick.
"""

import random
from collections.abc import Sequence

from src.domain.intent import FALLBACK_INTENT, IntentDefinition, get_intent
from src.domain.loyalty import clamp_score
from src.domain.records import DEFAULT_CLIENT_NAME, ClientProfile

AUTH_REQUIRED_MESSAGE = (
    "Pour accéder à cette fonctionnalité, vous devez d'abord vous identifier "
    "avec votre numéro WhatsApp."
)

NAME_PLACEHOLDER = "{{nom}}"
SCORE_PLACEHOLDER = "{{fidelite}}"


def fill_placeholders(template: str, client: ClientProfile | None) -> str:
    """Replace {{nom}} and {{fidelite}} (clamped to 0-100); a missing client gets generic values."""
    if client is None:
        name, score = DEFAULT_CLIENT_NAME, 0
    else:
        name, score = client.display_name, clamp_score(client.fidelite_score)
    return template.replace(NAME_PLACEHOLDER, name).replace(SCORE_PLACEHOLDER, str(score))


def compose_reply(
    intent_name: str,
    intents: Sequence[IntentDefinition],
    client: ClientProfile | None,
    rng: random.Random,
) -> str:
    intent = get_intent(intents, intent_name)
    if intent is None:
        fallback = get_intent(intents, FALLBACK_INTENT)
        return fallback.responses[0] if fallback and fallback.responses else ""

    if intent.requires_auth and client is None:
        return AUTH_REQUIRED_MESSAGE

    if not intent.responses:
        return ""
    return fill_placeholders(rng.choice(intent.responses), client)
