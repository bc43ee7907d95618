"""
Chat session tests using the keyword classifier and the in-memory store.

No network, no credentials, no LLM API calls.
"""

import random

import pytest

from src.adapters.keyword_intent import KeywordIntentClassifier
from src.adapters.memory_store import InMemoryFrontDeskStore
from src.chat import (
    INVALID_PHONE_MESSAGE,
    UNKNOWN_PHONE_MESSAGE,
    ChatAuthError,
    ChatConfig,
    ChatSession,
    resolve_reply,
)
from src.content import load_intents
from src.domain.intent import IntentClassifier, get_intent
from src.domain.records import ClientProfile
from src.domain.response import AUTH_REQUIRED_MESSAGE


class ExplodingClassifier(IntentClassifier):
    async def classify(self, message: str) -> str:
        raise RuntimeError("model unavailable")


@pytest.fixture
def store():
    return InMemoryFrontDeskStore()


@pytest.fixture
def session(store):
    return ChatSession(
        ChatConfig(store=store, classifier=KeywordIntentClassifier(), rng=random.Random(1))
    )


async def _register(store, **kw) -> ClientProfile:
    defaults = dict(
        id="",
        full_name="Amani Bahati",
        whatsapp_number="970000001",
        fidelite_score=35,
    )
    defaults.update(kw)
    return await store.insert_client(ClientProfile(**defaults))


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_authenticate_known_client(store, session):
    client = await _register(store)
    result = await session.authenticate("970 000 001")

    assert result.id == client.id
    assert session.is_authenticated
    (welcome,) = session.messages
    assert welcome.sender == "bot"
    assert welcome.text.startswith("Bonjour Amani Bahati ! 👋")
    assert "VIP" not in welcome.text


@pytest.mark.asyncio
async def test_authenticate_with_country_code_prefix(store, session):
    await _register(store, whatsapp_number="+243970000002")
    client = await session.authenticate("970000002", "+243")
    assert client.whatsapp_number == "+243970000002"


@pytest.mark.asyncio
async def test_vip_welcome(store, session):
    await _register(store, is_vip=True)
    await session.authenticate("970000001")
    assert "client VIP" in session.messages[0].text


@pytest.mark.asyncio
async def test_short_number_rejected(session):
    with pytest.raises(ChatAuthError, match=INVALID_PHONE_MESSAGE):
        await session.authenticate("12345")
    assert not session.is_authenticated


@pytest.mark.asyncio
async def test_unknown_number_rejected(store, session):
    await _register(store)
    with pytest.raises(ChatAuthError) as exc_info:
        await session.authenticate("990000009")
    assert str(exc_info.value) == UNKNOWN_PHONE_MESSAGE
    assert session.messages == []


@pytest.mark.asyncio
async def test_logout_clears_transcript(store, session):
    await _register(store)
    await session.authenticate("970000001")
    await session.send("Bonjour")
    session.logout()
    assert not session.is_authenticated
    assert session.messages == []


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_blank_message_ignored(session):
    assert await session.send("   ") is None
    assert session.messages == []


@pytest.mark.asyncio
async def test_anonymous_public_intent(session):
    reply = await session.send("Avez-vous un parking ?")
    assert reply.sender == "bot"
    assert reply.text in get_intent(load_intents(), "parking_info").responses
    assert [m.sender for m in session.messages] == ["user", "bot"]


@pytest.mark.asyncio
async def test_anonymous_protected_intent_asks_to_identify(session):
    reply = await session.send("Mon score fidélité")
    assert reply.text == AUTH_REQUIRED_MESSAGE


@pytest.mark.asyncio
async def test_identified_client_gets_score(store, session):
    await _register(store, fidelite_score=35)
    await session.authenticate("970000001")
    reply = await session.send("Mon score fidélité")
    assert "35%" in reply.text
    assert len(session.messages) == 3


@pytest.mark.asyncio
async def test_greeting_uses_client_name(store, session):
    await _register(store)
    await session.authenticate("970000001")
    reply = await session.send("Bonjour, je voudrais réserver une chambre")
    assert "Amani Bahati" in reply.text


@pytest.mark.asyncio
async def test_gibberish_gets_fallback(session):
    reply = await session.send("xyzxyz nonsense")
    assert reply.text in get_intent(load_intents(), "fallback").responses


@pytest.mark.asyncio
async def test_classifier_failure_answers_with_fallback(store):
    session = ChatSession(ChatConfig(store=store, classifier=ExplodingClassifier()))
    reply = await session.send("Bonjour")
    assert reply.text in get_intent(load_intents(), "fallback").responses


# ---------------------------------------------------------------------------
# Resolver without a session
# ---------------------------------------------------------------------------

def test_resolve_reply_anonymous():
    assert resolve_reply("Mon score fidélité", None, random.Random(0)) == AUTH_REQUIRED_MESSAGE


def test_resolve_reply_with_client():
    client = ClientProfile(id="c1", full_name="Neema", whatsapp_number="970000003",
                           fidelite_score=64)
    assert "64%" in resolve_reply("Mon score fidélité", client, random.Random(0))


def test_resolve_reply_is_stable_per_intent():
    templates = set(get_intent(load_intents(), "goodbye").responses)
    for seed in range(10):
        reply = resolve_reply("Au revoir", None, random.Random(seed))
        assert reply in {t.replace("{{nom}}", "cher client") for t in templates}
