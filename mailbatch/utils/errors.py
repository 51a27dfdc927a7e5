"""Custom exception classes for mailbatch."""


class MailBatchError(Exception):
    """Base exception for all application errors."""

    pass


class InvalidInputError(MailBatchError):
    """A submission was malformed and no job was created."""

    pass


class EmptyInputError(InvalidInputError):
    """A submission contained no addresses."""

    def __init__(self, message: str = "No emails found in submission") -> None:
        super().__init__(message)


class CSVParseError(InvalidInputError):
    """The uploaded address list could not be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid CSV: {message}")


class JobNotFoundError(MailBatchError):
    """No job is registered under the requested identifier."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class DuplicateJobError(MailBatchError):
    """A job with the same identifier is already registered."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job already exists: {job_id}")


class JobStateError(MailBatchError):
    """A job mutation violated the lifecycle rules."""

    pass


class VerificationError(MailBatchError):
    """A single address could not be verified."""

    pass
