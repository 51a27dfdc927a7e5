"""Job-related Pydantic models."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

Reachability = Literal["yes", "no", "unknown", "error"]


class JobState(str, Enum):
    """Lifecycle states of a batch job."""

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.FAILED)


class ValidationOptions(BaseModel):
    """Optional checks enabled for every address of a job."""

    smtp_check: bool = False
    gravatar_check: bool = False
    catch_all_check: bool = False

    model_config = {"frozen": True}

    @property
    def syntax_only(self) -> bool:
        """True when no check beyond syntax is enabled."""
        return not (self.smtp_check or self.gravatar_check or self.catch_all_check)


class ValidationOutcome(BaseModel):
    """Result of validating a single address."""

    email: str
    reachable: Reachability
    error: Optional[str] = None

    model_config = {"frozen": True}


class JobSnapshot(BaseModel):
    """Point-in-time copy of a job record."""

    id: str = Field(min_length=1)
    status: JobState
    options: ValidationOptions
    progress: int = Field(ge=0)
    total: int = Field(ge=0)
    results: list[Optional[ValidationOutcome]] = Field(default_factory=list)
    created_at: datetime
    error_message: Optional[str] = None


class JobProgress(BaseModel):
    """Lightweight polling view of a job."""

    progress: int = Field(ge=0)
    total: int = Field(ge=0)
    status: JobState
