"""
Outbound messaging workflow.

  1. Code: pick a message category from the client's loyalty signals
     (or use the category the receptionist chose)
  2. Code: pick a template at random, address it to the client,
     optionally append the chatbot invitation
  3. Channel: deliver (WhatsApp link, email, console)
  4. Store: append a MessageLog, and a bot_envoi notification on success

Staff-written templates (message_templates) replace step 2 when a
template id is given; their trigger becomes the category.

A channel failure is logged as a "failed" MessageLog and re-raised.
"""

import logging
import random
from dataclasses import dataclass, field, replace

from src.communication.ports import MessageChannel, OutboundMessage
from src.content import load_message_templates
from src.domain.loyalty import MESSAGE_CATEGORIES, select_message_category
from src.domain.records import ClientProfile, MessageLog, MessageTemplate, Notification
from src.domain.store import FrontDeskStore
from src.settings import HotelSettings

log = logging.getLogger(__name__)

AUTO_CATEGORY = "auto"
TEMPLATE_TRIGGERS = ("post_checkout", "inactif", "anniversaire", "manuel")


class OutreachError(Exception):
    """A message could not be composed; the text is shown to the receptionist."""


def message_client_name(client: ClientProfile) -> str:
    return client.full_name or client.nom or "Client"


def address_message(message: str, client_name: str) -> str:
    return f"Cher(e) {client_name}, {message[:1].lower()}{message[1:]}"


def random_message(
    category: str,
    rng: random.Random,
    client_name: str | None = None,
    templates: dict[str, tuple[str, ...]] | None = None,
) -> str:
    """Uniform pick from *category*; a name turns it into "Cher(e) <name>, ..."."""
    templates = templates if templates is not None else load_message_templates()
    message = rng.choice(templates[category])
    if client_name:
        message = address_message(message, client_name)
    return message


def smart_message(
    client: ClientProfile,
    rng: random.Random,
    trigger: str | None = None,
) -> tuple[str, str]:
    """Return (category, text) chosen from the client's loyalty signals."""
    category = select_message_category(client, trigger)
    return category, random_message(category, rng, message_client_name(client))


def add_chatbot_link(message: str, chatbot_url: str) -> str:
    return f"{message}\n\n💬 Des questions ? Contactez-nous directement ici : {chatbot_url}"


@dataclass
class OutreachConfig:
    store: FrontDeskStore
    channel: MessageChannel
    rng: random.Random
    settings: HotelSettings = field(default_factory=HotelSettings)


@dataclass
class OutreachResult:
    category: str
    body: str
    reference: str = ""


class Outreach:
    """Compose and send one templated message to one client."""

    def __init__(self, config: OutreachConfig):
        self._cfg = config

    def compose(
        self,
        client: ClientProfile,
        category: str = AUTO_CATEGORY,
        trigger: str | None = None,
        include_chatbot_link: bool = True,
    ) -> tuple[str, str]:
        if category == AUTO_CATEGORY:
            category, body = smart_message(client, self._cfg.rng, trigger)
        elif category in MESSAGE_CATEGORIES:
            body = random_message(category, self._cfg.rng, message_client_name(client))
        else:
            raise OutreachError(f"Catégorie de message inconnue : {category}")

        if include_chatbot_link:
            body = add_chatbot_link(body, self._cfg.settings.chatbot_url)
        return category, body

    async def send(
        self,
        client_id: str,
        category: str = AUTO_CATEGORY,
        trigger: str | None = None,
        include_chatbot_link: bool = True,
        template_id: str | None = None,
    ) -> OutreachResult:
        client = await self._cfg.store.get_client(client_id)
        if client is None:
            raise OutreachError("Client introuvable.")

        if template_id:
            template = await self._cfg.store.get_template(template_id)
            if template is None or not template.is_active:
                raise OutreachError("Modèle de message introuvable ou inactif.")
            category = template.trigger
            body = address_message(template.content, message_client_name(client))
            if include_chatbot_link:
                body = add_chatbot_link(body, self._cfg.settings.chatbot_url)
        else:
            category, body = self.compose(client, category, trigger, include_chatbot_link)

        channel = self._cfg.channel
        message = OutboundMessage(
            client_id=client.id,
            client_name=client.display_name,
            body=body,
            category=category,
            whatsapp_number=f"{client.whatsapp_country_code}{client.whatsapp_number}",
            email=client.email,
            subject=f"{self._cfg.settings.hotel_name} - Message pour {client.display_name}",
        )
        entry = MessageLog(
            id="",
            client_id=client.id,
            canal=channel.name,
            statut="sent",
            category=category,
            body=body,
            template_id=template_id or None,
        )

        try:
            reference = await channel.deliver(message)
        except Exception:
            await self._cfg.store.insert_message_log(replace(entry, statut="failed"))
            log.error("client=%s channel=%s delivery failed", client.id, channel.name)
            raise

        await self._cfg.store.insert_message_log(entry)
        await self._cfg.store.insert_notification(self._sent_notification(client, channel.name))

        log.info("client=%s channel=%s category=%s sent", client.id, channel.name, category)
        return OutreachResult(category=category, body=body, reference=reference)

    async def history(self, limit: int = 50) -> tuple[list[MessageLog], int]:
        """Latest message logs, newest first, and how many of them went out."""
        logs = await self._cfg.store.list_message_logs(limit)
        return logs, sum(entry.statut == "sent" for entry in logs)

    # -- templates -----------------------------------------------------------

    async def templates(self, active_only: bool = False) -> list[MessageTemplate]:
        templates = await self._cfg.store.list_templates()
        if active_only:
            templates = [t for t in templates if t.is_active]
        return templates

    async def save_template(self, template: MessageTemplate) -> MessageTemplate:
        """Insert when *template* has no id yet, update it otherwise."""
        if not template.name.strip() or not template.content.strip():
            raise OutreachError("Le nom et le contenu du modèle sont obligatoires.")
        if template.trigger not in TEMPLATE_TRIGGERS:
            raise OutreachError(f"Déclencheur inconnu : {template.trigger}")
        if not template.id:
            return await self._cfg.store.insert_template(template)
        if await self._cfg.store.get_template(template.id) is None:
            raise OutreachError("Modèle de message introuvable.")
        await self._cfg.store.update_template(template)
        return template

    async def delete_template(self, template_id: str) -> None:
        await self._cfg.store.delete_template(template_id)

    @staticmethod
    def _sent_notification(client: ClientProfile, canal: str) -> Notification:
        if canal == "email":
            titre = "Email envoyé"
            body = f"Email envoyé à {client.display_name} ({client.email})"
        elif canal == "whatsapp":
            titre = "Message WhatsApp envoyé"
            body = f"Message envoyé à {client.display_name} via WhatsApp"
        else:
            titre = "Message envoyé"
            body = f"Message envoyé à {client.display_name}"
        return Notification(id="", titre=titre, body=body, type="bot_envoi", client_id=client.id)
