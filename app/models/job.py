"""Job model for asynchronous AI processing."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from app.config import settings
from app.database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Job(Base):
    """Job represents one unit of deferred AI work and its lifecycle state."""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(Text, nullable=False)  # 'ANALYZE_VIDEO', 'ANALYZE_FILE', 'GENERATE_SCENARIO'
    status = Column(Text, nullable=False, default="PENDING")
    input = Column(JSONType, nullable=False)
    result = Column(JSONType)
    error = Column(Text)
    retry_count = Column(Integer, nullable=False, default=0)
    max_retries = Column(Integer, nullable=False, default=settings.MAX_JOB_RETRIES)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)

    __table_args__ = (
        Index("idx_jobs_status", "status"),
        Index("idx_jobs_created_at", "created_at"),
    )
