"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any

import pytest

from inbox_triage.exceptions import BridgeAPIError
from inbox_triage.models import Item


class FakeBackend:
    """In-memory bridge double.

    By default every mutation succeeds immediately, except for ids in
    ``failures``. ``script`` queues per-call outcomes for an id, each
    optionally held until its gate is set.
    """

    def __init__(self, items: list[Item] | None = None) -> None:
        self.items = list(items or [])
        self.failures: set[str] = set()
        self.fetch_error: Exception | None = None
        self.calls: list[tuple[str, str, Any]] = []
        self.deals: list[tuple[str, str]] = []
        self._scripts: dict[str, deque[tuple[asyncio.Event | None, bool | Exception]]] = {}

    def script(self, item_id: str, result: bool | Exception, hold: bool = False) -> asyncio.Event | None:
        gate = asyncio.Event() if hold else None
        self._scripts.setdefault(item_id, deque()).append((gate, result))
        return gate

    async def fetch_items(self, account: str) -> list[Item]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.items)

    async def _outcome(self, item_id: str) -> bool:
        script = self._scripts.get(item_id)
        if script:
            gate, result = script.popleft()
            if gate is not None:
                await gate.wait()
            if isinstance(result, Exception):
                raise result
            return result
        await asyncio.sleep(0)
        if item_id in self.failures:
            raise BridgeAPIError("Bridge API error: 500", status_code=500)
        return True

    async def mutate_item(
        self,
        item_id: str,
        account: str,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        self.calls.append((item_id, action, metadata))
        return await self._outcome(item_id)

    async def create_deal(self, item: Item, account: str, deal_type: str) -> bool:
        self.deals.append((item.id, deal_type))
        return await self._outcome(item.id)


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from inbox_triage.config import Settings

    return Settings(
        bridge_url="http://bridge.test",
        bridge_secret="test-secret",
        account="me@x.com",
        log_level="DEBUG",
        debug=True,
        max_retries=2,
        retry_delay=0.0,
    )


@pytest.fixture
def inbox_items() -> list[Item]:
    """A small inbox with three items from one company domain."""
    return [
        Item(id="t1", sender="Billing <billing@acme.com>", subject="Invoice #1", read=False),
        Item(id="t2", sender="Support <support@acme.com>", subject="Ticket update"),
        Item(id="t3", sender="news@ACME.com", subject="Newsletter", read=False),
        Item(id="t4", sender="Friend <someone@gmail.com>", subject="Lunch?"),
        Item(id="t5", sender="pal@gmail.com", subject="Photos"),
        Item(id="t6", sender="Vendor <sales@globex.io>", subject="Quote"),
    ]


@pytest.fixture
def fake_backend(inbox_items) -> FakeBackend:
    return FakeBackend(inbox_items)


@pytest.fixture
def sample_thread_payload() -> dict:
    """Provide a bridge thread response with a quoted reply chain."""
    return {
        "messages": [
            {
                "id": "m1",
                "from": "Me <me@x.com>",
                "to": "Vendor <vendor@acme.com>",
                "cc": "",
                "date": "Mon, 01 Jan 2024 09:00:00 +0000",
                "subject": "Pricing",
                "body": "Hi, could you send pricing?",
                "isMe": True,
            },
            {
                "id": "m2",
                "from": "Vendor <vendor@acme.com>",
                "to": "me@x.com, cc2@y.com",
                "cc": "",
                "date": "Tue, 02 Jan 2024 10:30:00 +0000",
                "subject": "Re: Pricing",
                "body": (
                    "Attached.\n\nOn Mon, Jan 1, 2024 at 9:00 AM Me <me@x.com> wrote:\n"
                    "> Hi, could you send pricing?"
                ),
                "bodyHtml": (
                    '<div dir="ltr">Attached.</div>'
                    '<div class="gmail_quote"><blockquote>Hi, could you send pricing?</blockquote></div>'
                ),
                "isMe": False,
            },
        ],
        "hasUnsubscribe": False,
    }
