"""GET /api/npl-data - non-performing loan balances"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from loan_dashboard.api.dependencies import get_reporting_repository, get_request_id
from loan_dashboard.api.v1.errors import translate_errors
from loan_dashboard.api.v1.schemas import NplResponse, NplSchema
from loan_dashboard.infrastructure.database.models import npl_outstanding_balance
from loan_dashboard.infrastructure.database.repositories import ReportingRepository
from loan_dashboard.infrastructure.observability.logging import log_query
from loan_dashboard.infrastructure.observability.metrics import record_rows_returned

router = APIRouter()


@router.get("/npl-data", response_model=NplResponse)
def get_npl_data(
    request: Request,
    repo: ReportingRepository = Depends(get_reporting_repository),
):
    """
    Retrieve arrears buckets for the latest report date.

    Returns:
        One row per loan type: 7, 14, 21, 30 day loans, Grand Total, then any others
    """
    request_id = get_request_id(request)
    start_time = time.time()

    with translate_errors("NPL query", request_id):
        records = repo.get_npl_records()

    record_rows_returned("npl", len(records))
    log_query(request_id, "npl", [npl_outstanding_balance.name], len(records), (time.time() - start_time) * 1000)

    return NplResponse(
        npl_data=[NplSchema(**vars(r)) for r in records],
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
