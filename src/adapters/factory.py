import os

from src.domain.intent import IntentClassifier
from src.domain.store import FrontDeskStore


def create_store(backend: str | None = None, db_path: str | None = None) -> FrontDeskStore:
    """
    Factory: pick the FrontDeskStore adapter from STORE_BACKEND.

    "sqlite" (default) uses DB_PATH; "supabase" needs SUPABASE_URL and
    SUPABASE_KEY; "memory" keeps everything in-process.
    """
    backend = backend or os.environ.get("STORE_BACKEND", "sqlite")

    if backend == "sqlite":
        from .sqlite_store import SqliteFrontDeskStore

        path = db_path or os.environ.get("DB_PATH", "data/frontdesk.db")
        if path != ":memory:" and os.path.dirname(path):
            os.makedirs(os.path.dirname(path), exist_ok=True)
        return SqliteFrontDeskStore(db_path=path)

    if backend == "supabase":
        from .supabase_store import SupabaseFrontDeskStore

        return SupabaseFrontDeskStore(
            url=os.environ["SUPABASE_URL"],
            api_key=os.environ["SUPABASE_KEY"],
        )

    if backend == "memory":
        from .memory_store import InMemoryFrontDeskStore

        return InMemoryFrontDeskStore()

    raise ValueError(f"Unknown store backend: {backend!r}")


def create_classifier(kind: str | None = None) -> IntentClassifier:
    """Factory: "keyword" (default) or "claude", from CHAT_CLASSIFIER."""
    kind = kind or os.environ.get("CHAT_CLASSIFIER", "keyword")

    if kind == "keyword":
        from .keyword_intent import KeywordIntentClassifier

        return KeywordIntentClassifier()

    if kind == "claude":
        from .claude_intent import ClaudeIntentClassifier

        return ClaudeIntentClassifier()

    raise ValueError(f"Unknown intent classifier: {kind!r}")
