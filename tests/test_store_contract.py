"""
FrontDeskStore contract tests.

Runs the shared contract against:
  - InMemoryFrontDeskStore   (always)
  - SqliteFrontDeskStore     (always, ":memory:" database)
  - SupabaseFrontDeskStore   (skipped without SUPABASE_URL / SUPABASE_KEY)
"""

import os

import pytest

from src.adapters.memory_store import InMemoryFrontDeskStore
from src.adapters.sqlite_store import SqliteFrontDeskStore
from src.adapters.supabase_store import SupabaseFrontDeskStore
from tests.contracts.frontdesk_store_contract import FrontDeskStoreContract


class TestInMemoryFrontDeskStore(FrontDeskStoreContract):

    def create_store(self):
        return InMemoryFrontDeskStore()


class TestSqliteFrontDeskStore(FrontDeskStoreContract):

    def create_store(self):
        return SqliteFrontDeskStore(":memory:")


@pytest.mark.skipif(
    not (os.environ.get("SUPABASE_URL") and os.environ.get("SUPABASE_KEY")),
    reason="SUPABASE_URL / SUPABASE_KEY not set",
)
class TestSupabaseFrontDeskStore(FrontDeskStoreContract):

    def create_store(self):
        return SupabaseFrontDeskStore(
            url=os.environ["SUPABASE_URL"],
            api_key=os.environ["SUPABASE_KEY"],
        )
