import re
from urllib.parse import quote

from .ports import MessageChannel, OutboundMessage

WA_BASE_URL = "https://wa.me"


def whatsapp_link(number: str, text: str) -> str:
    """Click-to-chat link: digits only in the path, text URL-encoded."""
    digits = re.sub(r"\D", "", number)
    return f"{WA_BASE_URL}/{digits}?text={quote(text, safe='')}"


class WhatsAppLinkChannel(MessageChannel):
    """
    Adapter: build a wa.me click-to-chat link for the receptionist to open.

    Nothing is sent automatically; the link is the tracking reference and
    is also kept in `links` so a UI or CLI can display it.
    """

    name = "whatsapp"

    def __init__(self):
        self.links: list[str] = []

    async def deliver(self, message: OutboundMessage) -> str:
        if not re.sub(r"\D", "", message.whatsapp_number):
            raise ValueError(f"client {message.client_id} has no WhatsApp number")
        link = whatsapp_link(message.whatsapp_number, message.body)
        self.links.append(link)
        return link
