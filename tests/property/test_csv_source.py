"""Property-based tests for CSV address extraction."""

from typing import List, Tuple

import pytest
from hypothesis import given, settings, strategies as st

from mailbatch.services.csv_source import is_valid_address, parse_csv_emails
from mailbatch.utils.errors import CSVParseError, InvalidInputError

local_parts = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=12)
domains = st.sampled_from(["x.com", "y.org", "example.com", "mail.example.net"])
addresses = st.builds(lambda local, domain: f"{local}@{domain}", local_parts, domains)
junk = st.sampled_from(["", "name", "not-an-address", "@x.com", "a@", "a@@x.com", "42"])


class TestParseCSVEmails:
    """Cells that are addresses are kept in row-major order."""

    def test_non_addresses_filtered(self) -> None:
        emails = parse_csv_emails(b"a@x.com,not-an-address,b@y.com\n")

        assert emails == ["a@x.com", "b@y.com"]
        assert len(emails) == 2

    def test_row_major_order(self) -> None:
        content = "name,email,backup\nAnn,ann@x.com,ann2@y.org\nBob,bob@x.com,\n"

        assert parse_csv_emails(content) == ["ann@x.com", "ann2@y.org", "bob@x.com"]

    def test_quoted_cells_and_bom(self) -> None:
        content = '\ufeff"a@x.com","b, c",d@y.com\r\n'.encode("utf-8")

        assert parse_csv_emails(content) == ["a@x.com", "d@y.com"]

    def test_duplicates_preserved(self) -> None:
        assert parse_csv_emails("a@x.com\na@x.com\n") == ["a@x.com", "a@x.com"]

    def test_empty_file(self) -> None:
        assert parse_csv_emails(b"") == []

    def test_undecodable_bytes_rejected(self) -> None:
        with pytest.raises(CSVParseError) as exc_info:
            parse_csv_emails(b"a@x.com,\xff\xfe\xfa\n")
        assert isinstance(exc_info.value, InvalidInputError)
        assert "Invalid CSV" in str(exc_info.value)

    def test_malformed_quotes_rejected(self) -> None:
        with pytest.raises(CSVParseError):
            parse_csv_emails('a@x.com,"b@y.com"oops\n')

    @settings(max_examples=100)
    @given(
        rows=st.lists(
            st.lists(
                st.one_of(
                    addresses.map(lambda a: (a, True)),
                    junk.map(lambda j: (j, False)),
                ),
                min_size=1,
                max_size=5,
            ),
            min_size=1,
            max_size=10,
        )
    )
    def test_keeps_exactly_the_addresses(self, rows: List[List[Tuple[str, bool]]]) -> None:
        content = "\n".join(",".join(cell for cell, _ in row) for row in rows) + "\n"

        expected = [cell for row in rows for cell, is_address in row if is_address]

        assert parse_csv_emails(content) == expected


class TestIsValidAddress:
    """Syntax check used for filtering."""

    @settings(max_examples=100)
    @given(address=addresses)
    def test_generated_addresses_valid(self, address: str) -> None:
        assert is_valid_address(address)

    @pytest.mark.parametrize(
        "value", ["", "plain", "@x.com", "a@", "a@@x.com", "a b@x.com", "a@x"]
    )
    def test_invalid_values(self, value: str) -> None:
        assert not is_valid_address(value)
