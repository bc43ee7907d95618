"""Load the static intent table and message templates from this directory."""

import json
from functools import lru_cache
from pathlib import Path

from src.domain.intent import IntentDefinition

_DIR = Path(__file__).parent


def _load_json(name: str):
    return json.loads((_DIR / f"{name}.json").read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def load_intents() -> tuple[IntentDefinition, ...]:
    """The intent table, in the order first-match classification walks it."""
    return tuple(
        IntentDefinition(
            name=row["name"],
            examples=tuple(row.get("examples", [])),
            responses=tuple(row.get("responses", [])),
            requires_auth=bool(row.get("requires_auth", False)),
        )
        for row in _load_json("intents")
    )


@lru_cache(maxsize=None)
def load_message_templates() -> dict[str, tuple[str, ...]]:
    """Outbound message templates keyed by category."""
    return {category: tuple(texts) for category, texts in _load_json("messages").items()}
