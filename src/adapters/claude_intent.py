"""
ClaudeIntentClassifier — asks Claude to name the intent of a chat message.

The system prompt is built from the intent table, so the model can only
choose among known intents.  Anything it answers outside the table maps
to "fallback".
"""

import json
import logging
import os
from collections.abc import Sequence

import anthropic

from src.content import load_intents
from src.domain.intent import (
    FALLBACK_INTENT,
    IntentClassifier,
    IntentDefinition,
    intent_names,
)

log = logging.getLogger(__name__)

_SYSTEM_PROMPT = """
You are the virtual assistant of a hotel and classify messages written by
guests in a chat widget.  Messages are usually in French.

Pick exactly ONE intent from the list below.  Each intent is shown with a
few example phrases.  If none of them fits, answer "fallback".

{intents}

Respond ONLY with valid JSON matching this schema:
{{"intent": "<one of the intent names above>"}}
""".strip()


def _describe(intents: Sequence[IntentDefinition]) -> str:
    lines = []
    for intent in intents:
        examples = ", ".join(f'"{e}"' for e in intent.examples) or "(none)"
        lines.append(f"- {intent.name}: {examples}")
    return "\n".join(lines)


class ClaudeIntentClassifier(IntentClassifier):
    """Intent classifier backed by Claude claude-haiku-4-5-20251001 (fast + cheap)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        intents: Sequence[IntentDefinition] | None = None,
    ):
        self._client = anthropic.Anthropic(api_key=api_key or os.environ["ANTHROPIC_API_KEY"])
        self._model = model
        self._intents = intents if intents is not None else load_intents()
        self._system = _SYSTEM_PROMPT.format(intents=_describe(self._intents))

    async def classify(self, message: str) -> str:
        response = self._client.messages.create(
            model=self._model,
            max_tokens=64,
            system=self._system,
            messages=[{"role": "user", "content": message}],
        )
        return self._parse(response.content[0].text)

    def _parse(self, raw: str) -> str:
        raw = raw.strip()
        # Strip markdown code fences if the model wraps the JSON
        if raw.startswith("```"):
            raw = raw.split("```")[1]
            if raw.startswith("json"):
                raw = raw[4:]
        try:
            name = json.loads(raw).get("intent")
        except (ValueError, AttributeError):
            log.warning("unparseable classifier output: %.80r", raw)
            return FALLBACK_INTENT

        if name not in intent_names(self._intents):
            log.info("classifier answered unknown intent %r → fallback", name)
            return FALLBACK_INTENT
        return name
