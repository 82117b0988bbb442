"""FastAPI application entry point."""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import inspect

from app.config import settings
from app.database import SessionLocal, engine, wait_for_database
from app.routes import chat, items, jobs, upload
from app.services.job_store import JobStore
from app.worker import JobProcessor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Scenario Studio",
    description="Video production planning with asynchronous AI jobs",
    version="0.1.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(jobs.router)
app.include_router(items.sources_router)
app.include_router(items.styles_router)
app.include_router(items.scenarios_router)
app.include_router(chat.router)
app.include_router(upload.router)


def run_migrations():
    """Apply Alembic migrations unless the schema is already in place."""
    if inspect(engine).has_table("jobs"):
        logger.info("Database tables already exist, skipping migrations")
        return

    from alembic import command
    from alembic.config import Config

    logger.info("Running database migrations...")
    alembic_cfg = Config(os.path.join(os.path.dirname(os.path.dirname(__file__)), "alembic.ini"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed successfully")


@app.on_event("startup")
async def startup_event():
    """Prepare the database and start the job processor."""
    logger.info("Starting application...")

    wait_for_database()
    run_migrations()

    processor = JobProcessor(JobStore(SessionLocal))
    app.state.job_processor = processor
    logger.info("Job processor started")

    if settings.RESUME_PENDING_ON_STARTUP:
        await processor.resume_pending()


@app.on_event("shutdown")
async def shutdown_event():
    """Cancel in-flight job tasks."""
    logger.info("Shutting down application...")
    processor = getattr(app.state, "job_processor", None)
    if processor is not None:
        await processor.shutdown()


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
