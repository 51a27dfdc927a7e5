"""Utility modules for mailbatch."""

from mailbatch.utils.errors import (
    CSVParseError,
    DuplicateJobError,
    EmptyInputError,
    InvalidInputError,
    JobNotFoundError,
    JobStateError,
    MailBatchError,
    VerificationError,
)

__all__ = [
    "MailBatchError",
    "InvalidInputError",
    "EmptyInputError",
    "CSVParseError",
    "JobNotFoundError",
    "DuplicateJobError",
    "JobStateError",
    "VerificationError",
]
