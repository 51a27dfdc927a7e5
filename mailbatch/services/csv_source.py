"""Extract addresses from uploaded CSV files."""

import csv
import io
import logging
from typing import List, Union

from email_validator import EmailNotValidError, validate_email

from mailbatch.utils.errors import CSVParseError

logger = logging.getLogger(__name__)


def is_valid_address(value: str) -> bool:
    """Check address syntax only; no DNS lookups."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def parse_csv_emails(content: Union[bytes, str]) -> List[str]:
    """
    Collect every cell that is a syntactically valid address.

    Cells are scanned row by row, left to right, and kept as supplied.
    Duplicates are preserved.

    Args:
        content: Raw CSV data, UTF-8 if bytes

    Returns:
        Addresses in encounter order

    Raises:
        CSVParseError: If the data is not decodable or not valid CSV
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVParseError(f"file is not UTF-8 text ({e.reason})") from e

    emails: List[str] = []
    reader = csv.reader(io.StringIO(content, newline=""), strict=True)
    try:
        for row in reader:
            for field in row:
                if is_valid_address(field):
                    emails.append(field)
    except csv.Error as e:
        raise CSVParseError(f"line {reader.line_num}: {e}") from e

    logger.debug(f"Parsed {len(emails)} addresses from {reader.line_num} lines")
    return emails
