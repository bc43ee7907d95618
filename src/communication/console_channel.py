from .ports import MessageChannel, OutboundMessage


class ConsoleChannel(MessageChannel):
    """Adapter: print to console and keep an outbox in memory. For dev/testing."""

    name = "console"

    def __init__(self):
        self.outbox: list[OutboundMessage] = []

    async def deliver(self, message: OutboundMessage) -> str:
        self.outbox.append(message)

        print(f"\n{'=' * 60}")
        print(f"  TO: {message.client_name}  ({message.whatsapp_number or message.email or '?'})")
        print(f"  CATEGORY: {message.category}")
        print(f"{'=' * 60}")
        print(message.body)
        print(f"{'=' * 60}\n")

        return f"console-{len(self.outbox)}"
