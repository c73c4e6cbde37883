"""Turn raw request parameters into a LoanQuery"""

from datetime import date
from typing import Any, Optional

from loan_dashboard.domain.exceptions import InvalidLoanTypeError, InvalidOperatorError
from loan_dashboard.domain.models import DateRange, DateWindow, LoanQuery, Operator

# Path segment -> loan_type as stored by the ETL
LOAN_TYPE_PATHS = {
    "7": "Nano 7D",
    "14": "Nano 14D",
    "21": "Nano 21D",
    "30": "Nano 30D",
}


def parse_operator(value: Optional[str]) -> Operator:
    """
    Parse the telco filter case-insensitively.

    Missing or blank input means both operators.

    Raises:
        InvalidOperatorError: For anything other than airtel, mtn or both
    """
    if value is None or not value.strip():
        return Operator.BOTH
    try:
        return Operator(value.strip().lower())
    except ValueError:
        raise InvalidOperatorError(value) from None


def parse_positive_int(value: Any, default: int, maximum: int | None = None) -> int:
    """Lenient integer parameter: non-numeric falls back to default, result clamped to [1, maximum]"""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        parsed = default
    parsed = max(parsed, 1)
    if maximum is not None:
        parsed = min(parsed, maximum)
    return parsed


def parse_window(
    days: Any,
    start_date: Optional[date],
    end_date: Optional[date],
    default_days: int,
) -> DateWindow | DateRange:
    """Explicit range wins only when both ends are supplied"""
    if start_date and end_date:
        return DateRange(start=start_date, end=end_date)
    return DateWindow(days=parse_positive_int(days, default_days))


def resolve_loan_type(segment: str) -> str:
    """Map a path segment such as "14" to its canonical loan_type ("Nano 14D")"""
    try:
        return LOAN_TYPE_PATHS[segment.strip()]
    except KeyError:
        raise InvalidLoanTypeError(segment) from None


def build_loan_query_params(
    telco: Optional[str],
    days: Any,
    start_date: Optional[date],
    end_date: Optional[date],
    loan_type: Optional[str],
    limit: Any,
    default_days: int,
    default_limit: int,
    max_limit: int,
) -> LoanQuery:
    """Validate request parameters and assemble the query configuration"""
    return LoanQuery(
        operator=parse_operator(telco),
        window=parse_window(days, start_date, end_date, default_days),
        loan_type=loan_type or None,
        limit=parse_positive_int(limit, default_limit, max_limit),
    )
