"""Job lifecycle: submission and polling."""

import asyncio
import logging
from typing import Optional, Sequence, Set
from uuid import uuid4

from mailbatch.models.job import JobProgress, JobSnapshot, ValidationOptions
from mailbatch.services.job_store import Job, JobStore
from mailbatch.services.runner import BatchRunner
from mailbatch.services.verifier import ValidationCapability
from mailbatch.utils.errors import DuplicateJobError, EmptyInputError

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 5


def new_job_id() -> str:
    return f"job-{uuid4().hex[:12]}"


class JobService:
    """Creates jobs, schedules their runs and serves polling views."""

    def __init__(
        self,
        store: JobStore,
        verifier: ValidationCapability,
        concurrency: int = 10,
    ) -> None:
        """
        Initialize the JobService.

        Args:
            store: Registry that owns the job records
            verifier: Capability used to classify each address
            concurrency: Maximum in-flight verify calls per job
        """
        self.store = store
        self.verifier = verifier
        self.concurrency = concurrency
        self._tasks: Set["asyncio.Task[None]"] = set()

    async def submit(
        self,
        emails: Sequence[str],
        options: Optional[ValidationOptions] = None,
    ) -> JobSnapshot:
        """
        Register a batch and start validating it in the background.

        Returns as soon as the job is registered; the snapshot is in the
        pending state.

        Raises:
            EmptyInputError: If emails is empty
        """
        if not emails:
            raise EmptyInputError()

        emails = list(emails)
        options = options or ValidationOptions()
        job = self._register(len(emails), options)

        runner = BatchRunner(self.verifier, concurrency=self.concurrency)
        task = asyncio.create_task(runner.run(job, emails), name=f"run-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        return job.snapshot()

    def _register(self, total: int, options: ValidationOptions) -> Job:
        for _ in range(MAX_ID_ATTEMPTS):
            job = Job(job_id=new_job_id(), total=total, options=options)
            try:
                self.store.create(job)
            except DuplicateJobError:
                logger.warning(f"Job id collision on {job.id}, regenerating")
                continue
            return job
        raise DuplicateJobError(job.id)

    def get_results(self, job_id: str) -> JobSnapshot:
        """
        Return the full current record of a job.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        return self.store.snapshot(job_id)

    def get_progress(self, job_id: str) -> JobProgress:
        """
        Return progress, total and status of a job.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        return self.store.get(job_id).progress_view()

    @property
    def active_runs(self) -> int:
        return len(self._tasks)

    async def join(self) -> None:
        """Wait for every scheduled run to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
