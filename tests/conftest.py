"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from typing import Any, Callable, Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import Table, create_engine, insert
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from loan_dashboard.api.main import create_app
from loan_dashboard.infrastructure.database.models import metadata
from loan_dashboard.infrastructure.database.session import get_db


# Test database: one shared in-memory SQLite connection
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create reporting tables and session"""
    metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def loan_row() -> Callable[..., Dict[str, Any]]:
    """Factory for loan-data rows shaped like the ETL output"""

    def _make(**overrides: Any) -> Dict[str, Any]:
        row = {
            "load_date": date(2025, 8, 6),
            "loan_type": "Nano 7D",
            "denom": 500,
            "country": "Uganda",
            "telco": "Airtel",
            "qualified_base": 120000,
            "overall_actives_daily": 3400,
            "overall_actives_wtd": 15000.5,
            "overall_actives_mtd": 42000,
            "overall_actives_ytd": 250000,
            "lending_txns": 910,
            "gross_lent": 288920.22,
            "sfee_lent": 47019.22,
            "late_fees_charged": 100.0,
            "setup_fees_charged": 50.0,
            "interest_fees_charged": 25.0,
            "daily_fees_charged": 10.0,
            "recovery_txns": 800,
            "principal_recovered": 200000.0,
            "sfee_recovered": 30000.0,
            "late_fees_recovered": 80.0,
            "setup_fees_recovered": 40.0,
            "interest_fees_recovered": 20.0,
            "daily_fees_recovered": 5.0,
            "processed_at": datetime(2025, 8, 7, 2, 0, 0),
            "file_source": "airtel_20250806.csv",
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def seed(db: Session) -> Callable[..., None]:
    """Insert rows into a reporting table"""

    def _seed(table: Table, *rows: Dict[str, Any]) -> None:
        db.execute(insert(table), list(rows))
        db.commit()

    return _seed
