"""Unit tests for bridge payload parsing helpers."""

from inbox_triage.parsing.thread import (
    payload_to_item,
    payload_to_items,
    payload_to_message,
    payload_to_thread,
)


def test_payload_to_thread_parses_basic_fields(sample_thread_payload) -> None:
    thread = payload_to_thread("t1", sample_thread_payload, "me@x.com")

    assert thread.id == "t1"
    assert thread.message_count == 2
    assert [m.id for m in thread.messages] == ["m1", "m2"]
    last = thread.last_message
    assert last is not None
    assert last.from_raw == "Vendor <vendor@acme.com>"
    assert last.to_raw == "me@x.com, cc2@y.com"
    assert last.is_self is False
    assert last.body_markup is not None
    assert thread.messages[0].is_self is True


def test_is_self_derived_from_sender_when_flag_missing() -> None:
    message = payload_to_message({"from": "Me <ME@x.com>", "to": "a@b.com"}, "me@x.com")
    assert message.is_self is True

    other = payload_to_message({"from": "a@b.com"}, "me@x.com")
    assert other.is_self is False


def test_malformed_thread_payload_degrades() -> None:
    thread = payload_to_thread("t9", {"messages": [None, {"from": 3, "to": None}, "junk"]})

    assert len(thread.messages) == 1
    message = thread.messages[0]
    assert message.from_raw == "3"
    assert message.to_raw == ""
    assert message.cc_raw == ""
    assert message.body_text == ""
    assert message.body_markup is None


def test_non_dict_thread_payload() -> None:
    thread = payload_to_thread("t9", ["not", "a", "dict"])
    assert thread.messages == ()
    assert thread.last_message is None


def test_list_valued_header_is_joined() -> None:
    message = payload_to_message({"to": ["a@b.com", "c@d.com"]})
    assert message.to_raw == "a@b.com, c@d.com"


def test_payload_to_item_read_from_labels() -> None:
    item = payload_to_item({"id": "x1", "from": "a@b.com", "labels": ["INBOX", "UNREAD"]})
    assert item is not None
    assert item.read is False
    assert item.labels == ["INBOX", "UNREAD"]


def test_payload_to_items_skips_entries_without_id() -> None:
    items = payload_to_items({"emails": [{"id": "a"}, {"subject": "no id"}, None, {"id": "b"}]})
    assert [i.id for i in items] == ["a", "b"]


def test_payload_to_items_missing_key() -> None:
    assert payload_to_items({}) == []


def test_unsubscribe_flag() -> None:
    assert payload_to_thread("t1", {"messages": [], "hasUnsubscribe": True}).has_unsubscribe is True
    assert payload_to_thread("t1", {"messages": []}).has_unsubscribe is False
