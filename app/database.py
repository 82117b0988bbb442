"""Database engine, session factory and declarative base."""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_delay, wait_fixed

from app.config import settings

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session for a request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_delay(settings.DB_READY_TIMEOUT_SECONDS),
    wait=wait_fixed(2),
    reraise=True,
)
def wait_for_database(bind=engine) -> None:
    """Block until the database accepts connections."""
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database is ready")
