"""Async HTTP client for the studio API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.schemas.job import JobStatus, JobType

logger = logging.getLogger(__name__)

# Client-side tab names -> item collection endpoints
TAB_ENDPOINTS = {
    "style": "/styles",
    "sources": "/sources",
    "scenario": "/scenarios",
}


class StudioClient:
    """Thin wrapper over the REST API. Non-2xx responses raise httpx.HTTPStatusError."""

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Initialize the client."""
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "StudioClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        response = await self._http.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def endpoint_for(tab: str) -> str:
        """Collection endpoint for a client tab."""
        try:
            return TAB_ENDPOINTS[tab]
        except KeyError:
            raise ValueError(f"Unknown tab: {tab}")

    # Jobs

    async def create_job(self, job_type: JobType, input_payload: Dict[str, Any]) -> Dict[str, Any]:
        """Submit a job. Returns {jobId, status, createdAt}."""
        return await self._request("POST", "/jobs", json={"type": JobType(job_type).value, "input": input_payload})

    async def get_job(self, job_id: str) -> Dict[str, Any]:
        """Fetch the status of one job."""
        return await self._request("GET", f"/jobs/{job_id}")

    async def list_jobs(self, status: Optional[JobStatus] = None) -> List[Dict[str, Any]]:
        """List jobs, optionally filtered by status."""
        params = {"status": JobStatus(status).value} if status is not None else None
        return await self._request("GET", "/jobs", params=params)

    # Item collections

    async def list_items(self, tab: str) -> List[Dict[str, Any]]:
        return await self._request("GET", self.endpoint_for(tab))

    async def create_item(self, tab: str, item: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", self.endpoint_for(tab), json=item)

    async def update_item(self, tab: str, item: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", self.endpoint_for(tab), json=item)

    async def delete_item(self, tab: str, item_id: str) -> None:
        await self._request("DELETE", self.endpoint_for(tab), params={"id": item_id})
