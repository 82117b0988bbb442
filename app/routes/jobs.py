"""Job routes: submission and status polling."""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from app.database import SessionLocal
from app.schemas.job import (
    JobCreate,
    JobCreateResponse,
    JobResponse,
    JobStatus,
    JobStatusResponse,
    JobType,
)
from app.services.errors import JobNotFoundError
from app.services.job_store import JobStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_job_store() -> JobStore:
    """Job store bound to the application database."""
    return JobStore(SessionLocal)


def get_job_processor(request: Request):
    """Job processor created at startup."""
    processor = getattr(request.app.state, "job_processor", None)
    if processor is None:
        raise HTTPException(status_code=503, detail="Job processor not initialized")
    return processor


@router.post("", response_model=JobCreateResponse, status_code=201)
async def create_job(
    data: JobCreate,
    store: JobStore = Depends(get_job_store),
    processor=Depends(get_job_processor),
):
    """
    Submit a job: persist it as PENDING and start processing in the background.

    The response is sent immediately; the outcome is observed by polling
    GET /jobs/{job_id}.
    """
    if not data.type or data.input is None:
        raise HTTPException(status_code=400, detail="type and input are required")

    try:
        job_type = JobType(data.type)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown job type: {data.type}")

    if not isinstance(data.input, dict):
        raise HTTPException(status_code=400, detail="input must be an object")

    job = await asyncio.to_thread(store.insert, job_type, data.input)
    processor.submit(job.id)

    return JobCreateResponse(job_id=job.id, status=job.status, created_at=job.created_at)


@router.get("", response_model=List[JobResponse])
def list_jobs(
    status: Optional[JobStatus] = None,
    store: JobStore = Depends(get_job_store),
):
    """List jobs, newest first, optionally filtered by status."""
    return [JobResponse.model_validate(job, from_attributes=True) for job in store.list_by_status(status)]


@router.get("/{job_id}", response_model=JobStatusResponse)
def get_job_status(
    job_id: str,
    store: JobStore = Depends(get_job_store),
):
    """Get job status and, once finished, its result or error."""
    try:
        job = store.get_by_id(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")

    return JobStatusResponse.model_validate(job, from_attributes=True)
