"""GET /api/status - freshness of the operator tables"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from loan_dashboard.api.dependencies import get_reporting_repository, get_request_id
from loan_dashboard.api.v1.errors import translate_errors
from loan_dashboard.api.v1.schemas import StatusResponse, TableStatusSchema
from loan_dashboard.infrastructure.database.repositories import ReportingRepository

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
def get_status(
    request: Request,
    repo: ReportingRepository = Depends(get_reporting_repository),
):
    """Latest load date and row count per operator table"""
    with translate_errors("Status query", get_request_id(request)):
        table_status = repo.get_table_status()

    return StatusResponse(
        data_status={
            operator: TableStatusSchema(latest_date=s.latest_date, total_records=s.total_records)
            for operator, s in table_status.items()
        },
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
