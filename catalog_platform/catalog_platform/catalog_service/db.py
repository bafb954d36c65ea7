"""
Database connection and session management for the Catalog Service
"""
from datetime import datetime
from typing import Generator
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db() -> None:
    """
    Create all tables. Called from the application lifespan hook.
    """
    # Import models so they are registered with Base
    from . import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully")
    except SQLAlchemyError as e:
        logger.error("Failed to initialize database: %s", e)
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get a request scoped database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection(db: Session) -> bool:
    """
    Check if the database connection is working.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection check failed: %s", e)
        return False


def purge_expired_revocations(db: Session) -> int:
    """
    Delete revocation entries whose tokens have expired anyway.

    Returns:
        Number of rows removed
    """
    from .models import RevokedToken

    removed = (
        db.query(RevokedToken)
        .filter(RevokedToken.expires_at < datetime.utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Purged %d expired token revocations", removed)
    return removed
