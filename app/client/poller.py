"""Client-side polling of many in-flight jobs on a single interval."""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from app.client.api import StudioClient
from app.config import settings
from app.schemas.job import TERMINAL_STATUSES, JobStatus

logger = logging.getLogger(__name__)


@dataclass
class JobInfo:
    """Associates a job with the placeholder item it will fill in."""

    item_id: str
    target_tab: str
    loading_item: Dict[str, Any]


CompleteCallback = Callable[[str, JobInfo, Dict[str, Any]], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[str, JobInfo, str], Union[None, Awaitable[None]]]


async def _invoke(callback: Callable, *args) -> None:
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class MultiJobPoller:
    """
    Tracks in-flight jobs and reports each one's outcome exactly once.

    One interval drives the whole tracked set. A job leaves the set when it
    completes, fails, or its status can no longer be fetched.
    """

    def __init__(
        self,
        client: StudioClient,
        on_complete: CompleteCallback,
        on_error: ErrorCallback,
        interval_ms: int = settings.CLIENT_POLL_INTERVAL_MS,
    ):
        """Initialize poller."""
        self.client = client
        self.on_complete = on_complete
        self.on_error = on_error
        self.interval = interval_ms / 1000
        self._tracked: Dict[str, JobInfo] = {}
        self._task: Optional[asyncio.Task] = None

    @property
    def tracked(self) -> Dict[str, JobInfo]:
        return self._tracked

    @property
    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()

    def track(self, job_id: str, info: JobInfo) -> None:
        """Start following a job. Tracking the same id twice is a no-op."""
        self._tracked.setdefault(job_id, info)

    def untrack(self, job_id: str) -> None:
        self._tracked.pop(job_id, None)

    async def tick(self, tracked: Dict[str, JobInfo]) -> None:
        """Check every tracked job once, dispatching callbacks for finished ones."""
        for job_id, info in list(tracked.items()):
            try:
                job = await self.client.get_job(job_id)
            except (httpx.HTTPError, ValueError) as e:
                # ValueError covers bodies that are not JSON
                logger.warning(f"Dropping job {job_id}, status unavailable: {e}")
                tracked.pop(job_id, None)
                continue
            if not isinstance(job, dict):
                logger.warning(f"Dropping job {job_id}, unexpected status payload: {job!r}")
                tracked.pop(job_id, None)
                continue

            try:
                status = JobStatus(job.get("status"))
            except ValueError:
                status = None
            if status not in TERMINAL_STATUSES:
                continue

            try:
                if status == JobStatus.COMPLETED:
                    await _invoke(self.on_complete, job_id, info, job.get("result") or {})
                elif status == JobStatus.FAILED:
                    await _invoke(self.on_error, job_id, info, job.get("error") or "Unknown error")
                else:
                    await _invoke(self.on_error, job_id, info, "Job cancelled")
            except Exception as e:
                logger.error(f"Callback for job {job_id} failed: {e}", exc_info=True)
            finally:
                tracked.pop(job_id, None)

    def start(self) -> None:
        """Begin polling on the running event loop."""
        if self.is_polling:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="job-poller")

    async def stop(self) -> None:
        """Stop polling. Tracked jobs are kept."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            if self._tracked:
                try:
                    await self.tick(self._tracked)
                except Exception as e:
                    logger.error(f"Polling tick failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval)
