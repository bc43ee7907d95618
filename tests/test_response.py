"""
Reply composition: template pick, auth short-circuit, placeholders.

A seeded random.Random pins the template pick where the exact text matters.
"""

import random

import pytest

from src.content import load_intents
from src.domain.intent import get_intent
from src.domain.records import ClientProfile
from src.domain.response import AUTH_REQUIRED_MESSAGE, compose_reply, fill_placeholders

INTENTS = load_intents()


def _client(**kw) -> ClientProfile:
    defaults = dict(
        id="c1",
        full_name="Amani Bahati",
        whatsapp_number="970000001",
        fidelite_score=42,
    )
    defaults.update(kw)
    return ClientProfile(**defaults)


def _responses(name: str) -> tuple[str, ...]:
    return get_intent(INTENTS, name).responses


def test_fill_placeholders_with_client():
    text = fill_placeholders("Bonjour {{nom}}, fidélité {{fidelite}}%", _client())
    assert text == "Bonjour Amani Bahati, fidélité 42%"


def test_fill_placeholders_without_client():
    text = fill_placeholders("Bonjour {{nom}}, fidélité {{fidelite}}%", None)
    assert text == "Bonjour cher client, fidélité 0%"


@pytest.mark.parametrize("stored, shown", [(150, "100"), (-5, "0"), (None, "0")])
def test_fill_placeholders_clamps_stored_score(stored, shown):
    assert fill_placeholders("{{fidelite}}", _client(fidelite_score=stored)) == shown


def test_loyalty_reply_never_shows_more_than_100():
    reply = compose_reply("loyalty_status", INTENTS, _client(fidelite_score=150), random.Random(0))
    assert "100%" in reply
    assert "150" not in reply


def test_fill_placeholders_client_without_name():
    client = _client(full_name="", nom="", prenom="", fidelite_score=0)
    assert fill_placeholders("Merci {{nom}}", client) == "Merci cher client"


def test_auth_intent_without_client_asks_to_identify():
    for name in ("check_availability", "make_reservation", "wifi_info", "loyalty_status"):
        assert compose_reply(name, INTENTS, None, random.Random(1)) == AUTH_REQUIRED_MESSAGE


def test_auth_intent_with_client_answers():
    reply = compose_reply("loyalty_status", INTENTS, _client(), random.Random(1))
    assert "42%" in reply
    assert "{{" not in reply


def test_public_intent_without_client():
    reply = compose_reply("greeting", INTENTS, None, random.Random(3))
    expected = {t.replace("{{nom}}", "cher client") for t in _responses("greeting")}
    assert reply in expected


def test_unknown_intent_gives_first_fallback_response():
    reply = compose_reply("book_taxi", INTENTS, _client(), random.Random(0))
    assert reply == _responses("fallback")[0]


def test_same_seed_same_reply():
    a = compose_reply("amenities", INTENTS, None, random.Random(7))
    b = compose_reply("amenities", INTENTS, None, random.Random(7))
    assert a == b


def test_reply_always_from_intent_templates():
    rng = random.Random()
    templates = set(_responses("parking_info"))
    for _ in range(20):
        assert compose_reply("parking_info", INTENTS, None, rng) in templates
