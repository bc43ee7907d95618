"""
Console chat with the hotel's virtual assistant.

Type a WhatsApp number at the prompt to identify as a registered client,
or just start chatting anonymously.

Usage:
    source .env && python scripts/chat.py

Commands inside the chat:
    /login <number> [country code]   identify as a client
    /logout                          forget the client, clear the transcript
    /quit                            leave

Environment variables (all optional):
    STORE_BACKEND        - "sqlite" (default), "supabase" or "memory"
    DB_PATH              - SQLite database path (default: data/frontdesk.db)
    SUPABASE_URL, SUPABASE_KEY  - only when STORE_BACKEND=supabase
    CHAT_CLASSIFIER      - "keyword" (default) or "claude"
    ANTHROPIC_API_KEY    - only when CHAT_CLASSIFIER=claude
    HOTEL_NAME           - shown in the welcome message
    DEFAULT_COUNTRY_CODE - prefix tried when looking up a number (default: +243)
"""

import asyncio
import logging
import os
import sys

# Make sure project root is on sys.path when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.adapters.factory import create_classifier, create_store
from src.chat import ChatAuthError, ChatConfig, ChatSession
from src.settings import HotelSettings

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        print(f"ERROR: environment variable {name!r} is not set.", file=sys.stderr)
        sys.exit(1)
    return value


def build_session() -> ChatSession:
    settings = HotelSettings.from_env()
    if os.environ.get("CHAT_CLASSIFIER") == "claude":
        _require_env("ANTHROPIC_API_KEY")

    config = ChatConfig(
        store=create_store(db_path=settings.db_path),
        classifier=create_classifier(),
        hotel_name=settings.hotel_name,
        default_country_code=settings.default_country_code,
    )
    return ChatSession(config)


async def login(session: ChatSession, args: list[str]) -> None:
    if not args:
        print("Usage: /login <number> [country code]")
        return
    country_code = args[1] if len(args) > 1 else None
    try:
        await session.authenticate(args[0], country_code)
    except ChatAuthError as exc:
        print(f"bot> {exc}")
        return
    print(f"bot> {session.messages[0].text}")


async def main() -> None:
    session = build_session()
    print("Assistant virtuel — /login <numéro>, /logout, /quit\n")

    while True:
        try:
            line = await asyncio.to_thread(input, "vous> ")
        except EOFError:
            break

        if line.startswith("/"):
            cmd, *args = line.split()
            if cmd == "/quit":
                break
            if cmd == "/login":
                await login(session, args)
            elif cmd == "/logout":
                session.logout()
                print("bot> Vous êtes déconnecté.")
            else:
                print(__doc__)
            continue

        reply = await session.send(line)
        if reply is not None:
            print(f"bot> {reply.text}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
