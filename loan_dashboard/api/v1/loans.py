"""GET /api/loan-data family - loan activity snapshots and summaries"""

import time
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from loan_dashboard.api.dependencies import get_reporting_repository, get_request_id
from loan_dashboard.api.v1.errors import translate_errors
from loan_dashboard.api.v1.schemas import (
    LoanDataFilters,
    LoanDataResponse,
    LoanRecordSchema,
    LoanTypeDataResponse,
    SummaryFilters,
    SummaryResponse,
    SummarySchema,
)
from loan_dashboard.config import settings
from loan_dashboard.domain.filters import build_loan_query_params, resolve_loan_type
from loan_dashboard.domain.models import DateWindow, LoanQuery, LoanRecord
from loan_dashboard.infrastructure.database.queries import source_tables
from loan_dashboard.infrastructure.database.repositories import ReportingRepository
from loan_dashboard.infrastructure.observability.logging import log_query
from loan_dashboard.infrastructure.observability.metrics import record_rows_returned

router = APIRouter()


def _fetch_records(
    repo: ReportingRepository,
    query: LoanQuery,
    request_id: str,
    endpoint: str,
) -> List[LoanRecord]:
    start_time = time.time()
    records = repo.get_loan_records(query)

    duration_ms = (time.time() - start_time) * 1000
    tables = [table.name for table in source_tables(query.operator)]
    record_rows_returned(endpoint, len(records))
    log_query(request_id, endpoint, tables, len(records), duration_ms)
    return records


def _filters(query: LoanQuery, telco: Optional[str]) -> LoanDataFilters:
    window = query.window
    if isinstance(window, DateWindow):
        return LoanDataFilters(loan_type=query.loan_type, telco=telco or "both", days=window.days)
    return LoanDataFilters(
        loan_type=query.loan_type,
        telco=telco or "both",
        start_date=window.start.isoformat(),
        end_date=window.end.isoformat(),
    )


@router.get("/loan-data", response_model=LoanDataResponse)
def get_loan_data(
    request: Request,
    loan_type: Optional[str] = Query(None, description="Substring of the stored loan type"),
    telco: Optional[str] = Query("both", description="airtel, mtn or both"),
    days: Optional[str] = Query(None, description="Trailing window in days (default 7)"),
    start_date: Optional[date] = Query(None, description="Inclusive start, used with end_date"),
    end_date: Optional[date] = Query(None, description="Inclusive end, used with start_date"),
    limit: Optional[str] = Query(None, description="Row limit per operator table (default 1000)"),
    repo: ReportingRepository = Depends(get_reporting_repository),
):
    """
    Retrieve latest-snapshot loan rows for one or both operators.

    Returns:
        Records from every selected table, newest date first
    """
    request_id = get_request_id(request)

    with translate_errors("Database query", request_id):
        query = build_loan_query_params(
            telco=telco,
            days=days,
            start_date=start_date,
            end_date=end_date,
            loan_type=loan_type,
            limit=limit,
            default_days=settings.default_window_days,
            default_limit=settings.default_row_limit,
            max_limit=settings.max_row_limit,
        )
        records = _fetch_records(repo, query, request_id, "loan_data")

    return LoanDataResponse(
        data=[LoanRecordSchema(**record.to_dict()) for record in records],
        count=len(records),
        filters=_filters(query, telco),
    )


# Declared before /loan-data/{loan_type} so "summary" is not read as a loan type
@router.get("/loan-data/summary", response_model=SummaryResponse)
def get_loan_summary(
    request: Request,
    telco: Optional[str] = Query("both", description="airtel, mtn or both"),
    days: Optional[str] = Query(None, description="Trailing window in days (default 30)"),
    repo: ReportingRepository = Depends(get_reporting_repository),
):
    """Aggregate latest snapshots per (loan_type, telco) over a trailing window"""
    request_id = get_request_id(request)
    start_time = time.time()

    with translate_errors("Summary query", request_id):
        query = build_loan_query_params(
            telco=telco,
            days=days,
            start_date=None,
            end_date=None,
            loan_type=None,
            limit=None,
            default_days=settings.summary_window_days,
            default_limit=settings.default_row_limit,
            max_limit=settings.max_row_limit,
        )
        summaries = repo.get_summary(query)

    tables = [table.name for table in source_tables(query.operator)]
    record_rows_returned("summary", len(summaries))
    log_query(request_id, "summary", tables, len(summaries), (time.time() - start_time) * 1000)

    return SummaryResponse(
        summary=[SummarySchema(**vars(s)) for s in summaries],
        filters=SummaryFilters(telco=telco or "both", days=query.window.days),
    )


@router.get("/loan-data/{loan_type}", response_model=LoanTypeDataResponse)
def get_loan_data_by_type(
    loan_type: str,
    request: Request,
    telco: Optional[str] = Query("both", description="airtel, mtn or both"),
    days: Optional[str] = Query(None, description="Trailing window in days (default 7)"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: Optional[str] = Query(None, description="Row limit per operator table (default 500)"),
    repo: ReportingRepository = Depends(get_reporting_repository),
):
    """
    Retrieve loan rows for one product (7, 14, 21 or 30 day Nano loans).

    The path segment maps to the stored loan type, e.g. 14 -> "Nano 14D".
    """
    request_id = get_request_id(request)

    with translate_errors("Database query", request_id):
        canonical_type = resolve_loan_type(loan_type)
        query = build_loan_query_params(
            telco=telco,
            days=days,
            start_date=start_date,
            end_date=end_date,
            loan_type=canonical_type,
            limit=limit,
            default_days=settings.default_window_days,
            default_limit=settings.loan_type_row_limit,
            max_limit=settings.max_row_limit,
        )
        records = _fetch_records(repo, query, request_id, "loan_type")

    return LoanTypeDataResponse(
        data=[LoanRecordSchema(**record.to_dict()) for record in records],
        loan_type=canonical_type,
        count=len(records),
        filters=_filters(query, telco),
    )
