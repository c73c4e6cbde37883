"""Domain models - pure Python dataclasses representing reporting entities"""

from dataclasses import dataclass, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Union


class Operator(str, Enum):
    """Mobile network operator filter"""

    AIRTEL = "airtel"
    MTN = "mtn"
    BOTH = "both"


@dataclass(frozen=True)
class DateWindow:
    """Trailing window ending today"""

    days: int


@dataclass(frozen=True)
class DateRange:
    """Explicit inclusive load_date range"""

    start: date
    end: date


@dataclass(frozen=True)
class LoanQuery:
    """Logical loan-data request shared by the list, per-type and summary endpoints"""

    operator: Operator
    window: Union[DateWindow, DateRange]
    loan_type: Optional[str] = None
    limit: int = 1000


@dataclass(frozen=True)
class LoanRecord:
    """One normalized (date, telco, country, loan_type, denom) snapshot"""

    date: str
    telco: str
    country: str
    loan_type: str
    denom: int

    # Base activity
    qualified_base: int
    overall_actives_daily: int
    overall_actives_wtd: float
    overall_actives_mtd: int
    overall_actives_ytd: int

    # Lending
    lending_txns: int
    gross_lent: float
    sfee_lent: float
    principal_lent: float

    # Fees charged
    late_fees_charged: float
    setup_fees_charged: float
    interest_fees_charged: float
    daily_fees_charged: float

    # Recovery
    recovery_txns: int
    principal_recovered: float
    sfee_recovered: float
    gross_recovered: float

    # Fees recovered
    late_fees_recovered: float
    setup_fees_recovered: float
    interest_fees_recovered: float
    daily_fees_recovered: float

    # Metadata
    processed_at: str
    file_source: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the alias fields the dashboard still reads"""
        data = asdict(self)
        data.update(
            lending_transactions=self.lending_txns,
            service_fee_lent=self.sfee_lent,
            recovery_transactions=self.recovery_txns,
            service_fee_recovered=self.sfee_recovered,
            unique_users=self.overall_actives_daily,
            overall_unique_users=self.overall_actives_ytd,
            fx_rate=1.0,
        )
        return data


@dataclass(frozen=True)
class SummaryRecord:
    """Aggregate of one (loan_type, telco) over a trailing window"""

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


@dataclass(frozen=True)
class NplRecord:
    """Arrears-bucketed outstanding balance for one loan_type on the latest report date"""

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


@dataclass(frozen=True)
class TableStatus:
    """Freshness of one operator table"""

    latest_date: Optional[str]
    total_records: int
