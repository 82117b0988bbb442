"""Re-attach jobs still running server-side to their placeholder items after a reload."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx

from app.client.api import TAB_ENDPOINTS, StudioClient
from app.client.poller import JobInfo
from app.schemas.job import JobStatus

logger = logging.getLogger(__name__)

RESTORE_NOTICE = "処理中のジョブを復元しました: {types}"


@dataclass
class RestoreResult:
    """Placeholders awaiting a job, and the jobs to hand to the poller."""

    loading_items: List[Dict[str, Any]] = field(default_factory=list)
    active_jobs: Dict[str, JobInfo] = field(default_factory=dict)
    job_types: List[str] = field(default_factory=list)


async def restore_jobs(
    client: StudioClient,
    notify: Optional[Callable[[str], Any]] = None,
) -> RestoreResult:
    """
    Rebuild JobInfo for every PROCESSING job whose placeholder is still loading.

    Jobs without `_metadata.itemId`, with an unknown tab, or whose placeholder
    is gone or no longer loading are skipped. Nothing is created or modified,
    so running this twice yields the same result.

    Args:
        client: API client
        notify: Called once with a message listing the recovered job types

    Returns:
        RestoreResult (empty if the job list cannot be fetched)
    """
    result = RestoreResult()

    try:
        jobs = await client.list_jobs(JobStatus.PROCESSING)
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to restore jobs: {e}")
        return result

    collections: Dict[str, List[Dict[str, Any]]] = {}

    for job in jobs:
        job_input = job.get("input")
        metadata = job_input.get("_metadata") if isinstance(job_input, dict) else None
        if not isinstance(metadata, dict):
            metadata = {}
        item_id = metadata.get("itemId")
        target_tab = metadata.get("targetTab")

        if not item_id:
            logger.info(f"Job {job['id']} has no item metadata, cannot reattach")
            continue
        if target_tab not in TAB_ENDPOINTS:
            logger.warning(f"Job {job['id']} references unknown tab {target_tab!r}")
            continue
        if job["id"] in result.active_jobs:
            continue

        if target_tab not in collections:
            try:
                collections[target_tab] = await client.list_items(target_tab)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Failed to load {target_tab} items: {e}")
                collections[target_tab] = []

        loading_item = next((i for i in collections[target_tab] if i.get("id") == item_id), None)
        if loading_item is None or not loading_item.get("loading"):
            continue

        result.loading_items.append(loading_item)
        result.active_jobs[job["id"]] = JobInfo(
            item_id=item_id,
            target_tab=target_tab,
            loading_item=loading_item,
        )
        result.job_types.append(job["type"])

    if result.active_jobs:
        message = RESTORE_NOTICE.format(types=", ".join(result.job_types))
        logger.info(message)
        if notify is not None:
            notify(message)

    return result
