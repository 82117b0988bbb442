"""Job record store backed by SQLAlchemy."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker

from app.config import settings
from app.models.job import Job
from app.schemas.job import JobStatus, JobType
from app.services.errors import JobNotFoundError

logger = logging.getLogger(__name__)


def _status_value(status) -> str:
    return status.value if isinstance(status, JobStatus) else status


class JobStore:
    """
    Persistence for Job records.

    Every operation runs in its own short session, so callers always see the
    latest committed state of a job.
    """

    def __init__(self, session_factory: sessionmaker):
        """Initialize the store with a session factory."""
        self.session_factory = session_factory

    def _session(self) -> Session:
        return self.session_factory(expire_on_commit=False)

    def insert(
        self,
        job_type: JobType,
        input_payload: Dict[str, Any],
        max_retries: Optional[int] = None,
    ) -> Job:
        """Create a new PENDING job."""
        with self._session() as db:
            job = Job(
                type=job_type.value if isinstance(job_type, JobType) else job_type,
                status=JobStatus.PENDING.value,
                input=input_payload,
                retry_count=0,
                max_retries=settings.MAX_JOB_RETRIES if max_retries is None else max_retries,
            )
            db.add(job)
            db.commit()
            db.refresh(job)
            logger.info(f"Created job {job.id} ({job.type})")
            return job

    def get_by_id(self, job_id: str) -> Job:
        """
        Fetch a job by id.

        Raises:
            JobNotFoundError: If no job has this id
        """
        with self._session() as db:
            job = db.get(Job, job_id)
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")
            return job

    def list_by_status(self, status: Optional[JobStatus] = None) -> List[Job]:
        """List jobs, newest first, optionally filtered by status."""
        with self._session() as db:
            query = db.query(Job)
            if status is not None:
                query = query.filter(Job.status == _status_value(status))
            return query.order_by(Job.created_at.desc()).all()

    def update(self, job_id: str, **fields) -> Job:
        """
        Unconditionally write fields on a job.

        Raises:
            JobNotFoundError: If no job has this id
        """
        with self._session() as db:
            job = db.get(Job, job_id)
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")
            for key, value in fields.items():
                setattr(job, key, _status_value(value) if key == "status" else value)
            job.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(job)
            return job

    def update_if_status(self, job_id: str, expected: JobStatus, **fields) -> bool:
        """
        Atomically write fields only while the job is in the expected status.

        Returns:
            True if the row was updated, False if the job is missing or has
            already moved to another status.
        """
        values = {k: _status_value(v) if k == "status" else v for k, v in fields.items()}
        values["updated_at"] = datetime.utcnow()
        with self._session() as db:
            result = db.execute(
                update(Job)
                .where(Job.id == job_id, Job.status == _status_value(expected))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            db.commit()
            return result.rowcount == 1
