"""Unit tests for the command-line interface."""

import pytest

from inbox_triage import cli
from inbox_triage.config import get_settings
from inbox_triage.exceptions import BridgeAPIError
from inbox_triage.models import Item
from inbox_triage.parsing.thread import payload_to_thread


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("INBOX_TRIAGE_ACCOUNT", raising=False)
    monkeypatch.setenv("INBOX_TRIAGE_BRIDGE_URL", "http://bridge.test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class _FakeBridge:
    """Stands in for BridgeClient; thread ``b`` always fails to archive."""

    def __init__(self, settings=None) -> None:
        self.items = [Item(id="a", sender="x@acme.com"), Item(id="b", sender="y@acme.com")]
        self.fetch_error: Exception | None = None
        self.thread_payload: dict = {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def fetch_items(self, account: str) -> list[Item]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.items)

    async def mutate_item(self, item_id, account, action, metadata=None) -> bool:
        if item_id == "b":
            raise BridgeAPIError("Bridge API error: 500", status_code=500)
        return True

    async def create_deal(self, item, account, deal_type) -> bool:
        return True

    async def fetch_thread(self, item_id: str, account: str):
        return payload_to_thread(item_id, self.thread_payload, account)


def test_missing_account_is_configuration_error(capsys) -> None:
    assert cli.main(["list"]) == 2
    assert "No account given" in capsys.readouterr().err


def test_archive_reports_rollbacks(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(cli, "BridgeClient", _FakeBridge)

    assert cli.main(["--account", "me@x.com", "archive", "a", "b"]) == 1

    out = capsys.readouterr().out
    assert "FAILED\tb" in out
    assert "archive: 1 succeeded, 1 rolled back" in out


def test_unknown_subcommand_exits() -> None:
    with pytest.raises(SystemExit):
        cli.main(["explode"])


def test_archive_counts_each_thread_once(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(cli, "BridgeClient", _FakeBridge)

    assert cli.main(["--account", "me@x.com", "archive", "a", "a"]) == 0
    assert "archive: 1 succeeded, 0 rolled back" in capsys.readouterr().out


def test_archive_reports_failed_inbox_load(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    bridge = _FakeBridge()
    bridge.fetch_error = BridgeAPIError("bridge down", status_code=503)
    monkeypatch.setattr(cli, "BridgeClient", lambda settings=None: bridge)

    assert cli.main(["--account", "me@x.com", "archive", "a"]) == 1

    captured = capsys.readouterr()
    assert "Could not load the inbox: bridge down" in captured.err
    assert "succeeded" not in captured.out


def test_thread_shows_unsubscribe_and_recipients(
    monkeypatch: pytest.MonkeyPatch, capsys, sample_thread_payload
) -> None:
    bridge = _FakeBridge()
    bridge.thread_payload = {**sample_thread_payload, "hasUnsubscribe": True}
    monkeypatch.setattr(cli, "BridgeClient", lambda settings=None: bridge)

    assert cli.main(["--account", "me@x.com", "thread", "t1"]) == 0

    out = capsys.readouterr().out
    assert "Unsubscribe available" in out
    assert "Reply All (toggle available)" in out
    assert "To: vendor@acme.com, cc2@y.com" in out
    assert "On Mon, Jan 1" not in out
