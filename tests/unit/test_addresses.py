"""Unit tests for header address helpers."""

import pytest

from inbox_triage.parsing.addresses import (
    extract_domain,
    extract_email,
    extract_name,
    parse_addresses,
)


class TestParseAddresses:
    """Test suite for parse_addresses."""

    def test_mixed_header(self) -> None:
        header = 'Alice <Alice@Example.com>, "Bob, Jr." <bob@y.org>; carol@z.co.uk'
        assert parse_addresses(header) == ["alice@example.com", "bob@y.org", "carol@z.co.uk"]

    def test_duplicates_collapsed_case_insensitively(self) -> None:
        assert parse_addresses("a@x.com, A@X.COM") == ["a@x.com"]

    @pytest.mark.parametrize("header", [None, "", "undisclosed-recipients:;", 7])
    def test_missing_or_unparseable(self, header) -> None:
        assert parse_addresses(header) == []


def test_extract_email_prefers_brackets() -> None:
    assert extract_email("Vendor <Vendor@Acme.com>") == "vendor@acme.com"


def test_extract_email_bare_address() -> None:
    assert extract_email("billing@acme.com") == "billing@acme.com"


def test_extract_email_non_string() -> None:
    assert extract_email(None) == ""


def test_extract_name() -> None:
    assert extract_name('"Alice Smith" <alice@x.com>') == "Alice Smith"
    assert extract_name("alice@x.com") == "alice@x.com"


@pytest.mark.parametrize(
    ("sender", "domain"),
    [
        ("Billing <billing@Acme.COM>", "acme.com"),
        ("news@mail.acme.com", "mail.acme.com"),
        ("no address here", None),
        (None, None),
    ],
)
def test_extract_domain(sender, domain) -> None:
    assert extract_domain(sender) == domain
