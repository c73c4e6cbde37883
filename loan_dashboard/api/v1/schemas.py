"""Pydantic schemas for API responses"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class LoanRecordSchema(BaseModel):
    """Normalized loan-data snapshot plus dashboard alias fields"""

    date: str = Field(..., description="load_date as YYYY-MM-DD")
    telco: str
    country: str
    loan_type: str
    denom: int

    qualified_base: int
    overall_actives_daily: int
    overall_actives_wtd: float
    overall_actives_mtd: int
    overall_actives_ytd: int

    lending_txns: int
    gross_lent: float
    sfee_lent: float
    principal_lent: float

    late_fees_charged: float
    setup_fees_charged: float
    interest_fees_charged: float
    daily_fees_charged: float

    recovery_txns: int
    principal_recovered: float
    sfee_recovered: float
    gross_recovered: float

    late_fees_recovered: float
    setup_fees_recovered: float
    interest_fees_recovered: float
    daily_fees_recovered: float

    processed_at: str
    file_source: str

    # Aliases kept for the dashboard
    lending_transactions: int
    service_fee_lent: float
    recovery_transactions: int
    service_fee_recovered: float
    unique_users: int
    overall_unique_users: int
    fx_rate: float = 1.0


class LoanDataFilters(BaseModel):
    """Filters echoed back with loan-data responses"""

    loan_type: Optional[str] = None
    telco: str
    days: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class LoanDataResponse(BaseModel):
    """Response for GET /api/loan-data"""

    data: List[LoanRecordSchema]
    count: int
    filters: LoanDataFilters


class LoanTypeDataResponse(LoanDataResponse):
    """Response for GET /api/loan-data/{loan_type}"""

    loan_type: str


class SummarySchema(BaseModel):
    """Aggregated (loan_type, telco) figures"""

    loan_type: str
    telco: str
    record_count: int
    total_gross_lent: float
    total_principal_recovered: float
    total_service_fee_recovered: float
    total_late_fees_recovered: float
    total_lending_transactions: int
    total_recovery_transactions: int
    avg_qualified_base: float
    latest_date: str


class SummaryFilters(BaseModel):
    telco: str
    days: int


class SummaryResponse(BaseModel):
    """Response for GET /api/loan-data/summary"""

    summary: List[SummarySchema]
    filters: SummaryFilters


class NplSchema(BaseModel):
    """NPL balances for one loan type"""

    loan_type: str
    total_balance: float
    within_tenure: float
    arrears_30_days: float
    arrears_31_60_days: float
    arrears_61_90_days: float
    arrears_91_120_days: float
    arrears_121_150_days: float
    arrears_151_180_days: float
    arrears_181_plus_days: float
    arrears_percentage: float
    net_recovered_value: float
    unrecovered_percentage_net: float
    report_date: str


class NplResponse(BaseModel):
    """Response for GET /api/npl-data"""

    npl_data: List[NplSchema]
    timestamp: str


class TableStatusSchema(BaseModel):
    latest_date: Optional[str] = None
    total_records: int


class StatusResponse(BaseModel):
    """Response for GET /api/status"""

    status: str = "active"
    data_status: Dict[str, TableStatusSchema]
    timestamp: str
