"""Bounded-concurrency batch runner."""

import asyncio
import logging
from typing import Sequence, Tuple

from mailbatch.models.job import ValidationOutcome
from mailbatch.services.job_store import Job
from mailbatch.services.verifier import ValidationCapability

logger = logging.getLogger(__name__)

WorkItem = Tuple[int, str]


class BatchRunner:
    """
    Runs a job's addresses through a validation capability.

    A fixed pool of workers pulls (index, email) items from a queue, so at
    most `concurrency` verify calls are in flight regardless of batch size.
    Outcomes are written by index, which keeps results in input order.
    """

    def __init__(self, verifier: ValidationCapability, concurrency: int = 10) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.verifier = verifier
        self.concurrency = concurrency
        self._in_flight = 0
        self.max_in_flight = 0

    async def run(self, job: Job, emails: Sequence[str]) -> None:
        """
        Validate every address and drive the job to a terminal state.

        Per-address failures are recorded as error outcomes. The job is
        marked failed only when the batch itself cannot be processed.
        """
        job.mark_running()
        logger.info(f"Job {job.id} running: {job.total} addresses, {self.concurrency} workers")

        try:
            if not emails:
                raise ValueError("address list is empty")
            if len(emails) != job.total:
                raise ValueError(
                    f"address list has {len(emails)} entries, expected {job.total}"
                )

            queue: "asyncio.Queue[WorkItem]" = asyncio.Queue()
            for item in enumerate(emails):
                queue.put_nowait(item)

            workers = [
                asyncio.create_task(self._worker(job, queue), name=f"{job.id}-worker-{n}")
                for n in range(min(self.concurrency, len(emails)))
            ]
            # Join barrier: every worker exits only after the queue is drained
            try:
                await asyncio.gather(*workers)
            except BaseException:
                for worker in workers:
                    worker.cancel()
                raise

            job.mark_done()
        except Exception as e:
            logger.error(f"Job {job.id} failed: {e}")
            job.mark_failed(str(e))
            return

        logger.info(f"Job {job.id} completed: {job.total} addresses")

    async def _worker(self, job: Job, queue: "asyncio.Queue[WorkItem]") -> None:
        while True:
            try:
                index, email = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            outcome = await self._verify_one(job, email)
            job.record_outcome(index, outcome)

    async def _verify_one(self, job: Job, email: str) -> ValidationOutcome:
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            reachable = await self.verifier.verify(email, job.options)
            return ValidationOutcome(email=email, reachable=reachable)
        except Exception as e:
            logger.warning(f"Job {job.id}: verification of {email} failed: {e}")
            return ValidationOutcome(
                email=email, reachable="error", error=str(e) or type(e).__name__
            )
        finally:
            self._in_flight -= 1
