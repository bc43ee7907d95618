import os

from .ports import MessageChannel


def create_channel(channel: str | None = None) -> MessageChannel:
    """
    Factory: create the right adapter based on config.

    The channel can be passed explicitly or read from the
    MESSAGE_CHANNEL env var. Defaults to "whatsapp".
    """
    channel = channel or os.environ.get("MESSAGE_CHANNEL", "whatsapp")

    if channel == "email":
        from .email_channel import EmailChannel

        return EmailChannel(
            smtp_host=os.environ.get("EMAIL_SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.environ.get("EMAIL_SMTP_PORT", "587")),
            smtp_user=os.environ["EMAIL_USER"],
            smtp_password=os.environ["EMAIL_PASSWORD"],
            sender=os.environ.get("EMAIL_SENDER"),
            hotel_name=os.environ.get("HOTEL_NAME", "Hôtel Touriste"),
        )

    if channel == "whatsapp":
        from .whatsapp_channel import WhatsAppLinkChannel

        return WhatsAppLinkChannel()

    if channel == "console":
        from .console_channel import ConsoleChannel

        return ConsoleChannel()

    raise ValueError(f"Unknown message channel: {channel!r}")
