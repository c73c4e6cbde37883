"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from loan_dashboard.infrastructure.database.repositories import ReportingRepository
from loan_dashboard.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_reporting_repository(db: Session = Depends(get_db)) -> ReportingRepository:
    """Provide a repository bound to the request's session"""
    return ReportingRepository(db)
