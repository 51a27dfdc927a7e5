"""Pydantic data models for mailbatch."""

from mailbatch.models.job import (
    JobProgress,
    JobSnapshot,
    JobState,
    Reachability,
    ValidationOptions,
    ValidationOutcome,
)

__all__ = [
    "JobProgress",
    "JobSnapshot",
    "JobState",
    "Reachability",
    "ValidationOptions",
    "ValidationOutcome",
]
