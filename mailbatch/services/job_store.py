"""In-memory registry of batch jobs."""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from mailbatch.models.job import (
    JobProgress,
    JobSnapshot,
    JobState,
    ValidationOptions,
    ValidationOutcome,
)
from mailbatch.utils.errors import DuplicateJobError, JobNotFoundError, JobStateError

logger = logging.getLogger(__name__)


class Job:
    """
    Mutable record of one batch job.

    All mutable fields are guarded by the record's own lock. Readers go
    through snapshot() so they never see a half-applied update.
    """

    def __init__(
        self,
        job_id: str,
        total: int,
        options: ValidationOptions,
        created_at: Optional[datetime] = None,
    ) -> None:
        if total < 0:
            raise ValueError("total cannot be negative")
        self.id = job_id
        self.total = total
        self.options = options
        self.created_at = created_at or datetime.now(timezone.utc)

        self._lock = threading.Lock()
        self._status = JobState.PENDING
        self._progress = 0
        self._results: List[Optional[ValidationOutcome]] = [None] * total
        self._error_message: Optional[str] = None

    @property
    def status(self) -> JobState:
        with self._lock:
            return self._status

    @property
    def progress(self) -> int:
        with self._lock:
            return self._progress

    # ==================== Lifecycle ====================

    def mark_running(self) -> None:
        """Move the job from pending to running."""
        with self._lock:
            if self._status is not JobState.PENDING:
                raise JobStateError(
                    f"Job {self.id} cannot start from state {self._status.value}"
                )
            self._status = JobState.RUNNING

    def record_outcome(self, index: int, outcome: ValidationOutcome) -> int:
        """
        Store the outcome for one address and advance progress.

        Args:
            index: Position of the address in the submitted list
            outcome: Result of validating that address

        Returns:
            Progress after this update

        Raises:
            JobStateError: If the job is not running, the index is out of
                range, or the slot was already written
        """
        with self._lock:
            if self._status is not JobState.RUNNING:
                raise JobStateError(
                    f"Job {self.id} cannot record results in state {self._status.value}"
                )
            if not 0 <= index < self.total:
                raise JobStateError(f"Result index {index} out of range for job {self.id}")
            if self._results[index] is not None:
                raise JobStateError(f"Result {index} of job {self.id} already recorded")
            self._results[index] = outcome
            self._progress += 1
            return self._progress

    def mark_done(self) -> None:
        """Move the job from running to done once every slot is recorded."""
        with self._lock:
            if self._status is not JobState.RUNNING:
                raise JobStateError(
                    f"Job {self.id} cannot finish from state {self._status.value}"
                )
            if self._progress != self.total:
                raise JobStateError(
                    f"Job {self.id} finished with {self._progress}/{self.total} results"
                )
            self._status = JobState.DONE

    def mark_failed(self, message: str) -> None:
        """Move the job to failed. Terminal states are left untouched."""
        with self._lock:
            if self._status.is_terminal:
                raise JobStateError(
                    f"Job {self.id} cannot fail from state {self._status.value}"
                )
            self._status = JobState.FAILED
            self._error_message = message

    # ==================== Views ====================

    def snapshot(self) -> JobSnapshot:
        """Return a consistent copy of the job."""
        with self._lock:
            return JobSnapshot(
                id=self.id,
                status=self._status,
                options=self.options,
                progress=self._progress,
                total=self.total,
                results=list(self._results),
                created_at=self.created_at,
                error_message=self._error_message,
            )

    def progress_view(self) -> JobProgress:
        with self._lock:
            return JobProgress(progress=self._progress, total=self.total, status=self._status)


class JobStore:
    """Concurrency-safe registry of Job records keyed by id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._jobs: Dict[str, Job] = {}

    def create(self, job: Job) -> None:
        """
        Register a new job.

        Raises:
            DuplicateJobError: If a job with the same id exists
        """
        with self._lock:
            if job.id in self._jobs:
                raise DuplicateJobError(job.id)
            self._jobs[job.id] = job
        logger.info(f"Created job {job.id} with {job.total} addresses")

    def get(self, job_id: str) -> Job:
        """
        Return the live record for a job.

        Raises:
            JobNotFoundError: If no job is registered under job_id
        """
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def snapshot(self, job_id: str) -> JobSnapshot:
        return self.get(job_id).snapshot()

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
