import email.utils
import smtplib
from email.mime.text import MIMEText

from .ports import MessageChannel, OutboundMessage


class EmailChannel(MessageChannel):
    """Adapter: send the message to the client by email (SMTP + STARTTLS)."""

    name = "email"

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str,
        smtp_password: str,
        sender: str | None = None,
        hotel_name: str = "Hôtel Touriste",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.sender = sender or smtp_user
        self.hotel_name = hotel_name

    async def deliver(self, message: OutboundMessage) -> str:
        if not message.email:
            raise ValueError(f"client {message.client_id} has no email address")

        msg = MIMEText(message.body, _charset="utf-8")
        msg["Subject"] = message.subject or f"{self.hotel_name} - Message pour {message.client_name}"
        msg["From"] = self.sender
        msg["To"] = message.email
        msg["Message-ID"] = email.utils.make_msgid(domain="frontdesk-assistant")

        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

        return msg["Message-ID"]
