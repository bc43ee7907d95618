"""
IntentClassifier contract tests.

Runs the shared contract against:
  - KeywordIntentClassifier  (always, no API key needed)
  - ClaudeIntentClassifier   (skipped without ANTHROPIC_API_KEY)
"""

import os

import pytest

from src.adapters.claude_intent import ClaudeIntentClassifier
from src.adapters.keyword_intent import KeywordIntentClassifier
from tests.contracts.intent_classifier_contract import IntentClassifierContract


class TestKeywordIntentClassifier(IntentClassifierContract):

    def create_classifier(self):
        return KeywordIntentClassifier()


@pytest.mark.skipif(
    not os.environ.get("ANTHROPIC_API_KEY"),
    reason="ANTHROPIC_API_KEY not set",
)
class TestClaudeIntentClassifier(IntentClassifierContract):

    def create_classifier(self):
        return ClaudeIntentClassifier()
