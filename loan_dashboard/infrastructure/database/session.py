"""Database engine lifecycle and session injection"""

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from loan_dashboard.config import Settings

logger = logging.getLogger(__name__)


def create_db_engine(config: Settings) -> Engine:
    """Bounded connection pool; callers wait up to db_pool_timeout for a free connection"""
    return create_engine(
        config.sqlalchemy_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_recycle=config.db_pool_recycle,
    )


def verify_connection(engine: Engine) -> None:
    """Fail fast at start-up when the reporting store is unreachable"""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connected", extra={"step": "startup", "database": engine.url.database})


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency injection for database sessions from the app-scoped pool"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
