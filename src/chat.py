"""
Chat assistant session.

One ChatSession per open chat widget.  The transcript lives only in the
session's memory and is never persisted.

Flow for each user message:
  1. Classifier: free text → intent name (never empty, "fallback" if unsure)
  2. Code: pick a reply template, short-circuit auth-only intents for
     anonymous users, fill {{nom}} / {{fidelite}} from the session client
"""

import logging
import random
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from src.adapters.keyword_intent import find_intent
from src.content import load_intents
from src.domain.intent import FALLBACK_INTENT, IntentClassifier, IntentDefinition
from src.domain.records import DEFAULT_CLIENT_NAME, ChatMessage, ClientProfile
from src.domain.response import compose_reply
from src.domain.store import FrontDeskStore

log = logging.getLogger(__name__)

MIN_PHONE_DIGITS = 6

INVALID_PHONE_MESSAGE = "Veuillez entrer un numéro de téléphone valide"
UNKNOWN_PHONE_MESSAGE = (
    "Ce numéro n'est pas enregistré chez nous. "
    "Veuillez contacter la réception pour vous inscrire."
)


class ChatAuthError(Exception):
    """Identification failed; the text is shown to the chat user."""


@dataclass
class ChatConfig:
    store: FrontDeskStore
    classifier: IntentClassifier
    rng: random.Random = field(default_factory=random.Random)
    intents: Sequence[IntentDefinition] = field(default_factory=load_intents)
    hotel_name: str = "Hôtel Touriste"
    default_country_code: str = "+243"


def resolve_reply(
    text: str,
    client: ClientProfile | None,
    rng: random.Random,
    intents: Sequence[IntentDefinition] | None = None,
) -> str:
    """Keyword resolution and reply in one call, without a session."""
    intents = intents if intents is not None else load_intents()
    return compose_reply(find_intent(text, intents), intents, client, rng)


def welcome_message(client: ClientProfile, hotel_name: str) -> str:
    name = client.full_name or client.nom or DEFAULT_CLIENT_NAME
    lines = [
        f"Bonjour {name} ! 👋",
        "",
        f"Je suis l'assistant virtuel de l'{hotel_name}. Je suis ravi de vous retrouver !",
    ]
    if client.is_vip:
        lines += ["", "✨ En tant que client VIP, vous bénéficiez d'un service prioritaire."]
    lines += ["", "Comment puis-je vous aider aujourd'hui ?"]
    return "\n".join(lines)


class ChatSession:
    """
    Holds the identified client (if any) and the transcript.

    Call authenticate() with the client's WhatsApp number, then send()
    for every user message.  Anonymous use is allowed: intents that need
    an identified client answer with an instruction to identify first.
    """

    def __init__(self, config: ChatConfig):
        self._cfg = config
        self.client: ClientProfile | None = None
        self.messages: list[ChatMessage] = []

    @property
    def is_authenticated(self) -> bool:
        return self.client is not None

    async def authenticate(self, phone: str, country_code: str | None = None) -> ClientProfile:
        phone = "".join(ch for ch in phone if ch.isdigit())
        if len(phone) < MIN_PHONE_DIGITS:
            raise ChatAuthError(INVALID_PHONE_MESSAGE)

        country_code = country_code or self._cfg.default_country_code
        client = await self._cfg.store.find_by_phone(phone, country_code)
        if client is None:
            log.info("chat auth: unknown number ending %s", phone[-3:])
            raise ChatAuthError(UNKNOWN_PHONE_MESSAGE)

        self.client = client
        self.messages = [self._bot("welcome", welcome_message(client, self._cfg.hotel_name))]
        log.info("chat auth: client=%s", client.id)
        return client

    def logout(self) -> None:
        self.client = None
        self.messages = []

    async def send(self, text: str) -> ChatMessage | None:
        """Append the user's message and the bot's reply. Blank input is ignored."""
        if not text.strip():
            return None

        self.messages.append(
            ChatMessage(id=f"user-{uuid.uuid4().hex[:8]}", text=text, sender="user")
        )

        intent = await self._classify(text)
        reply = compose_reply(intent, self._cfg.intents, self.client, self._cfg.rng)
        log.debug("chat intent=%s client=%s", intent, self.client.id if self.client else "-")

        bot_message = self._bot(f"bot-{uuid.uuid4().hex[:8]}", reply)
        self.messages.append(bot_message)
        return bot_message

    async def _classify(self, text: str) -> str:
        try:
            return await self._cfg.classifier.classify(text)
        except Exception as exc:
            log.error("intent classification failed: %s", exc)
            return FALLBACK_INTENT

    @staticmethod
    def _bot(message_id: str, text: str) -> ChatMessage:
        return ChatMessage(id=message_id, text=text, sender="bot", timestamp=datetime.now())
