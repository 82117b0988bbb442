"""Client workspace: placeholders, job submission and outcome handling."""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx

from app.client.api import StudioClient
from app.client.poller import JobInfo, MultiJobPoller
from app.client.restore import RestoreResult, restore_jobs
from app.config import settings
from app.schemas.job import JobType

logger = logging.getLogger(__name__)

ERROR_TEMPLATE = "# エラー\n\n{message}"


class Workspace:
    """
    Client session that turns AI requests into loading placeholders.

    Each request creates a `loading` item, submits a job whose input carries
    `_metadata` pointing back at the item, and tracks the job. When the job
    finishes the item is filled in with the result, or with an error notice.
    """

    def __init__(
        self,
        client: StudioClient,
        interval_ms: int = settings.CLIENT_POLL_INTERVAL_MS,
        notify: Optional[Callable[[str], Any]] = None,
    ):
        self.client = client
        self.notify = notify
        self.poller = MultiJobPoller(client, self._on_complete, self._on_error, interval_ms)

    async def start(self) -> RestoreResult:
        """Restore jobs left running by a previous session, then start polling."""
        restored = await restore_jobs(self.client, self.notify)
        for job_id, info in restored.active_jobs.items():
            self.poller.track(job_id, info)
        self.poller.start()
        return restored

    async def stop(self) -> None:
        await self.poller.stop()

    async def analyze_video(self, url: str, mode: str) -> str:
        """Analyze a video into the style or sources collection. Returns the job id."""
        tab = "style" if mode == "style" else "sources"
        placeholder = {
            "name": url,
            "type": "video",
            "videoUrl": url,
            "content": f"# YouTube動画のAI分析\n\n動画URL: {url}\n\n分析中...",
        }
        return await self._submit(tab, placeholder, JobType.ANALYZE_VIDEO, {"url": url, "mode": mode})

    async def analyze_file(
        self,
        filename: str,
        mode: str,
        content: Optional[str] = None,
        file_data: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> str:
        """Analyze an uploaded file into the style or sources collection. Returns the job id."""
        tab = "style" if mode == "style" else "sources"
        placeholder = {
            "name": filename,
            "type": "file",
            "content": f"# ファイルのAI分析\n\nファイル名: {filename}\n\n分析中...",
        }
        payload = {"mode": mode, "filename": filename}
        if content is not None:
            payload["content"] = content
        if file_data is not None:
            payload["fileData"] = file_data
            payload["fileType"] = file_type
        return await self._submit(tab, placeholder, JobType.ANALYZE_FILE, payload)

    async def generate_scenario(
        self,
        styles: List[Dict[str, Any]],
        sources: List[Dict[str, Any]],
        chat_history: List[Dict[str, Any]],
    ) -> str:
        """Generate a scenario into the scenario collection. Returns the job id."""
        placeholder = {
            "name": f"シナリオ {datetime.now():%Y年%m月%d日 %H:%M:%S}",
            "type": "scenario",
            "content": "# シナリオ生成中...",
        }
        payload = {"styles": styles, "sources": sources, "chatHistory": chat_history}
        return await self._submit("scenario", placeholder, JobType.GENERATE_SCENARIO, payload)

    async def _submit(
        self,
        tab: str,
        placeholder: Dict[str, Any],
        job_type: JobType,
        payload: Dict[str, Any],
    ) -> str:
        item = await self.client.create_item(tab, {**placeholder, "loading": True})
        payload = {**payload, "_metadata": {"itemId": item["id"], "targetTab": tab}}

        try:
            job = await self.client.create_job(job_type, payload)
        except httpx.HTTPError as e:
            await self._resolve(tab, item["id"], ERROR_TEMPLATE.format(message=str(e)))
            raise

        self.poller.track(job["jobId"], JobInfo(item_id=item["id"], target_tab=tab, loading_item=item))
        logger.info(f"Submitted {job_type.value} job {job['jobId']} for {tab} item {item['id']}")
        return job["jobId"]

    async def _on_complete(self, job_id: str, info: JobInfo, result: Dict[str, Any]) -> None:
        content = result.get("scenario") or result.get("content") or ""
        await self._resolve(info.target_tab, info.item_id, content)

    async def _on_error(self, job_id: str, info: JobInfo, message: str) -> None:
        logger.warning(f"Job {job_id} failed: {message}")
        await self._resolve(info.target_tab, info.item_id, ERROR_TEMPLATE.format(message=message))

    async def _resolve(self, tab: str, item_id: str, content: str) -> None:
        await self.client.update_item(tab, {"id": item_id, "content": content, "loading": False})
