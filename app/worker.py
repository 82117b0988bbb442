"""Background job processor: lifecycle, deadline and retry policy."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Set

from app.agents import get_agent
from app.agents.base import BaseAgent
from app.config import settings
from app.database import SessionLocal
from app.schemas.job import JobStatus, JobType
from app.services.errors import (
    InputValidationError,
    JobNotFoundError,
    JobTimeoutError,
    error_message,
    is_retryable,
)
from app.services.job_store import JobStore
from app.services.llm_client import LLMClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

AgentFactory = Callable[[JobType, LLMClient], BaseAgent]


class JobProcessor:
    """
    Drives jobs through PENDING -> PROCESSING -> COMPLETED | FAILED.

    The processor keeps no durable state: every decision re-reads the job
    record, and every transition is a conditional write on the expected
    current status, so a late writer can never overwrite a terminal status.
    Runs and delayed retries are tracked as asyncio tasks owned by the
    processor.
    """

    def __init__(
        self,
        store: JobStore,
        llm_client: Optional[LLMClient] = None,
        agent_factory: AgentFactory = get_agent,
        job_timeout: float = settings.JOB_TIMEOUT_SECONDS,
        retry_base_delay_ms: int = settings.RETRY_BASE_DELAY_MS,
        retry_max_delay_ms: int = settings.RETRY_MAX_DELAY_MS,
    ):
        """Initialize processor."""
        self.store = store
        self.llm_client = llm_client or LLMClient()
        self.agent_factory = agent_factory
        self.job_timeout = job_timeout
        self.retry_base_delay_ms = retry_base_delay_ms
        self.retry_max_delay_ms = retry_max_delay_ms
        self._tasks: Set[asyncio.Task] = set()

    # Scheduling

    def submit(self, job_id: str) -> asyncio.Task:
        """Start processing a job in the background without waiting for it."""
        return self._spawn(self.process(job_id), name=f"job-{job_id}")

    def retry_delay(self, retry_count: int) -> float:
        """Exponential backoff in seconds before retry number `retry_count + 1`."""
        delay_ms = min(self.retry_base_delay_ms * (2 ** retry_count), self.retry_max_delay_ms)
        return delay_ms / 1000

    async def resume_pending(self) -> int:
        """Re-submit every PENDING job. Returns how many were submitted."""
        jobs = await asyncio.to_thread(self.store.list_by_status, JobStatus.PENDING)
        for job in jobs:
            self.submit(job.id)
        if jobs:
            logger.info(f"Resumed {len(jobs)} pending job(s)")
        return len(jobs)

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every run and scheduled retry has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel all in-flight runs and pending retries."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info(f"Cancelled {len(tasks)} job task(s)")

    def _spawn(self, coro, name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        """Single sink for failures escaping a detached job task."""
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Unhandled error in {task.get_name()}: {exc}", exc_info=exc)

    def _schedule_retry(self, job_id: str, delay: float) -> asyncio.Task:
        return self._spawn(self._retry_after(job_id, delay), name=f"job-{job_id}-retry")

    async def _retry_after(self, job_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.process(job_id)

    # Lifecycle

    async def process(self, job_id: str) -> None:
        """Run one attempt of a job under the wall-clock deadline."""
        deadline = asyncio.timeout(self.job_timeout)
        try:
            async with deadline:
                await self._run(job_id)
        except TimeoutError:
            if not deadline.expired():
                raise
            await self._handle_timeout(job_id)

    async def _run(self, job_id: str) -> None:
        started = await asyncio.to_thread(
            self.store.update_if_status,
            job_id,
            JobStatus.PENDING,
            status=JobStatus.PROCESSING,
            started_at=datetime.utcnow(),
        )
        if not started:
            logger.info(f"Job {job_id} is not pending, nothing to do")
            return

        try:
            job = await asyncio.to_thread(self.store.get_by_id, job_id)
            logger.info(f"Processing job {job_id} (type: {job.type}, attempt {job.retry_count + 1})")
            agent = self.agent_factory(self._job_type(job.type), self.llm_client)
            result = await agent.execute(job.input)
        except JobNotFoundError:
            logger.warning(f"Job {job_id} vanished during processing, aborting")
            return
        except Exception as e:
            await self._handle_error(job_id, e)
            return

        completed = await asyncio.to_thread(
            self.store.update_if_status,
            job_id,
            JobStatus.PROCESSING,
            status=JobStatus.COMPLETED,
            result=result,
            error=None,
            completed_at=datetime.utcnow(),
        )
        if completed:
            logger.info(f"Job {job_id} completed successfully")
        else:
            logger.warning(f"Job {job_id} finished after leaving PROCESSING, result discarded")

    def _job_type(self, value: str) -> JobType:
        try:
            return JobType(value)
        except ValueError:
            raise InputValidationError(f"Unknown job type: {value}")

    async def _handle_error(self, job_id: str, exc: Exception) -> None:
        """Retry with backoff or fail the job, based on the error class."""
        message = error_message(exc)

        try:
            job = await asyncio.to_thread(self.store.get_by_id, job_id)
        except JobNotFoundError:
            logger.warning(f"Job {job_id} vanished before its failure could be recorded")
            return

        if job.status != JobStatus.PROCESSING.value:
            logger.info(f"Job {job_id} already {job.status}, ignoring late failure: {message}")
            return

        if is_retryable(exc) and job.retry_count < job.max_retries:
            delay = self.retry_delay(job.retry_count)
            requeued = await asyncio.to_thread(
                self.store.update_if_status,
                job_id,
                JobStatus.PROCESSING,
                status=JobStatus.PENDING,
                retry_count=job.retry_count + 1,
                error=message,
            )
            if requeued:
                logger.warning(
                    f"Job {job_id} retry {job.retry_count + 1}/{job.max_retries} in {delay:.1f}s: {message}"
                )
                self._schedule_retry(job_id, delay)
            return

        failed = await asyncio.to_thread(
            self.store.update_if_status,
            job_id,
            JobStatus.PROCESSING,
            status=JobStatus.FAILED,
            error=message,
            completed_at=datetime.utcnow(),
        )
        if failed:
            logger.error(f"Job {job_id} failed after {job.retry_count} retries: {message}", exc_info=exc)

    async def _handle_timeout(self, job_id: str) -> None:
        timed_out = await asyncio.to_thread(
            self.store.update_if_status,
            job_id,
            JobStatus.PROCESSING,
            status=JobStatus.FAILED,
            error=JobTimeoutError().message,
            completed_at=datetime.utcnow(),
        )
        if timed_out:
            logger.error(f"Job {job_id} timed out after {self.job_timeout}s")


async def sweep_pending() -> None:
    """Process every PENDING job once, including retries, then return."""
    processor = JobProcessor(JobStore(SessionLocal))
    await processor.resume_pending()
    await processor.drain()


def main():
    """Entry point for a one-shot sweep of stranded PENDING jobs."""
    asyncio.run(sweep_pending())


if __name__ == "__main__":
    main()
