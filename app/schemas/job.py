"""Job-related Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from app.schemas.common import CamelModel, ChatTurn, Material
from app.services.errors import InputValidationError


class JobType(str, Enum):
    """Kinds of asynchronous AI work."""

    ANALYZE_VIDEO = "ANALYZE_VIDEO"
    ANALYZE_FILE = "ANALYZE_FILE"
    GENERATE_SCENARIO = "GENERATE_SCENARIO"


class JobStatus(str, Enum):
    """Lifecycle states of a job."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"  # reserved, never assigned


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})

AnalysisMode = Literal["style", "source"]


class JobInputBase(CamelModel):
    """Base for typed job inputs."""

    # Client bookkeeping ({itemId, targetTab}); stored as sent and never read here
    metadata: Any = Field(default=None, alias="_metadata")


class AnalyzeVideoInput(JobInputBase):
    """Input for ANALYZE_VIDEO."""

    url: str
    mode: AnalysisMode


class AnalyzeFileInput(JobInputBase):
    """Input for ANALYZE_FILE."""

    mode: AnalysisMode
    content: Optional[str] = None
    file_data: Optional[str] = None  # base64 data URL
    file_type: Optional[str] = None
    filename: Optional[str] = None


class GenerateScenarioInput(JobInputBase):
    """Input for GENERATE_SCENARIO."""

    styles: List[Material]
    sources: List[Material]
    chat_history: List[ChatTurn] = Field(default_factory=list)


JobInput = Union[AnalyzeVideoInput, AnalyzeFileInput, GenerateScenarioInput]

INPUT_SCHEMAS: Dict[JobType, Type[JobInputBase]] = {
    JobType.ANALYZE_VIDEO: AnalyzeVideoInput,
    JobType.ANALYZE_FILE: AnalyzeFileInput,
    JobType.GENERATE_SCENARIO: GenerateScenarioInput,
}


def parse_job_input(job_type: JobType, payload: Any) -> JobInput:
    """
    Validate a raw input payload against the schema of its job type.

    Raises:
        InputValidationError: If the payload does not match
    """
    if not isinstance(payload, dict):
        raise InputValidationError(f"Invalid input for {job_type.value}: expected an object")
    try:
        return INPUT_SCHEMAS[job_type].model_validate(payload)
    except PydanticValidationError as e:
        raise InputValidationError(f"Invalid input for {job_type.value}: {e.errors()[0]['msg']}")


# HTTP contract

class JobCreate(CamelModel):
    """Request body for job submission. Presence is checked by the route."""

    type: Optional[str] = None
    input: Optional[Any] = None


class JobCreateResponse(CamelModel):
    """Response after submitting a job."""

    job_id: str
    status: JobStatus
    created_at: Optional[datetime] = None


class JobStatusResponse(CamelModel):
    """Job status as seen by pollers."""

    id: str
    status: JobStatus
    type: str
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class JobResponse(JobStatusResponse):
    """Full job record."""

    input: Dict[str, Any]
    retry_count: int
    max_retries: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
