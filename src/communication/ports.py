from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class OutboundMessage:
    """What we send to a client."""

    client_id: str
    client_name: str
    body: str
    category: str  # "vip", "remerciement", ...
    whatsapp_number: str = ""  # international, e.g. "+243970000000"
    email: str | None = None
    subject: str = ""


class MessageChannel(ABC):
    """
    Port: how an outbound message leaves the hotel.

    The messaging workflow depends ONLY on this interface.
    It doesn't know or care whether the message goes out as a
    WhatsApp click-to-chat link, an email, or a line on the console.
    """

    name: str

    @abstractmethod
    async def deliver(self, message: OutboundMessage) -> str:
        """
        Hand the message to the channel.
        Returns a tracking reference (link, email Message-ID, etc.)
        Raises when the channel cannot take the message.
        """
        ...
