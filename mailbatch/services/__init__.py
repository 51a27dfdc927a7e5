"""Service layer for mailbatch."""

from mailbatch.services.csv_source import parse_csv_emails
from mailbatch.services.job_store import Job, JobStore
from mailbatch.services.jobs import JobService
from mailbatch.services.runner import BatchRunner
from mailbatch.services.verifier import EmailVerifier, ValidationCapability, create_email_verifier

__all__ = [
    "parse_csv_emails",
    "Job",
    "JobStore",
    "JobService",
    "BatchRunner",
    "EmailVerifier",
    "ValidationCapability",
    "create_email_verifier",
]
