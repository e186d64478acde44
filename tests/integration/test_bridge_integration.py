"""Integration tests against a live assistant bridge.

These run only when INBOX_TRIAGE_BRIDGE_SECRET and INBOX_TRIAGE_ACCOUNT
are set. They only read; nothing in the mailbox is changed.
"""

import os

import pytest

from inbox_triage.bridge import BridgeClient
from inbox_triage.config import Settings
from inbox_triage.replies import render_conversation, resolve_recipients

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not (os.getenv("INBOX_TRIAGE_BRIDGE_SECRET") and os.getenv("INBOX_TRIAGE_ACCOUNT")),
        reason="INBOX_TRIAGE_BRIDGE_SECRET and INBOX_TRIAGE_ACCOUNT not set",
    ),
]


@pytest.fixture
def live_settings() -> Settings:
    return Settings()


class TestBridgeIntegration:
    """Integration tests for the bridge client."""

    @pytest.mark.asyncio
    async def test_list_accounts_includes_configured_account(self, live_settings) -> None:
        async with BridgeClient(live_settings) as bridge:
            accounts = await bridge.list_accounts()

        assert live_settings.account.lower() in [a.lower() for a in accounts]

    @pytest.mark.asyncio
    async def test_fetch_items_and_first_thread(self, live_settings) -> None:
        account = live_settings.account
        async with BridgeClient(live_settings) as bridge:
            items = await bridge.fetch_items(account, max_results=5)
            if not items:
                pytest.skip("Inbox is empty")
            thread = await bridge.fetch_thread(items[0].id, account)

        assert thread.id == items[0].id
        assert thread.messages
        entries = render_conversation(thread)
        assert len(entries) == len(thread.messages)
        recipients = resolve_recipients(thread, account)
        assert account.lower() not in recipients.to
