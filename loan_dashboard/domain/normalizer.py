"""Normalization of raw reporting rows into typed output records"""

import math
from itertools import chain
from typing import Any, Iterable, List, Mapping

from loan_dashboard.domain.models import LoanRecord, NplRecord, SummaryRecord
from loan_dashboard.utils.date_utils import format_date, format_timestamp

Row = Mapping[str, Any]


def to_float(value: Any) -> float:
    """Lenient float: null, non-numeric, NaN and infinities become 0.0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def to_int(value: Any) -> int:
    """Lenient int: fractional input is truncated, anything unreadable becomes 0"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    return int(to_float(value))


def to_str(value: Any) -> str:
    return "" if value is None else str(value)


def normalize_row(row: Row) -> LoanRecord:
    """Convert one loan-data row; derived totals are always recomputed here"""
    gross_lent = to_float(row.get("gross_lent"))
    sfee_lent = to_float(row.get("sfee_lent"))

    principal_recovered = to_float(row.get("principal_recovered"))
    sfee_recovered = to_float(row.get("sfee_recovered"))
    late_fees_recovered = to_float(row.get("late_fees_recovered"))
    setup_fees_recovered = to_float(row.get("setup_fees_recovered"))
    interest_fees_recovered = to_float(row.get("interest_fees_recovered"))
    daily_fees_recovered = to_float(row.get("daily_fees_recovered"))

    return LoanRecord(
        date=format_date(row.get("load_date")),
        telco=to_str(row.get("telco")),
        country=to_str(row.get("country")),
        loan_type=to_str(row.get("loan_type")),
        denom=to_int(row.get("denom")),
        qualified_base=to_int(row.get("qualified_base")),
        overall_actives_daily=to_int(row.get("overall_actives_daily")),
        overall_actives_wtd=to_float(row.get("overall_actives_wtd")),
        overall_actives_mtd=to_int(row.get("overall_actives_mtd")),
        overall_actives_ytd=to_int(row.get("overall_actives_ytd")),
        lending_txns=to_int(row.get("lending_txns")),
        gross_lent=gross_lent,
        sfee_lent=sfee_lent,
        principal_lent=gross_lent - sfee_lent,
        late_fees_charged=to_float(row.get("late_fees_charged")),
        setup_fees_charged=to_float(row.get("setup_fees_charged")),
        interest_fees_charged=to_float(row.get("interest_fees_charged")),
        daily_fees_charged=to_float(row.get("daily_fees_charged")),
        recovery_txns=to_int(row.get("recovery_txns")),
        principal_recovered=principal_recovered,
        sfee_recovered=sfee_recovered,
        # All six components, not just principal + service fee
        gross_recovered=(
            principal_recovered
            + sfee_recovered
            + late_fees_recovered
            + setup_fees_recovered
            + interest_fees_recovered
            + daily_fees_recovered
        ),
        late_fees_recovered=late_fees_recovered,
        setup_fees_recovered=setup_fees_recovered,
        interest_fees_recovered=interest_fees_recovered,
        daily_fees_recovered=daily_fees_recovered,
        processed_at=format_timestamp(row.get("processed_at")),
        file_source=to_str(row.get("file_source")),
    )


def normalize(raw_rows: Iterable[Row]) -> List[LoanRecord]:
    return [normalize_row(row) for row in raw_rows]


def merge_records(batches: Iterable[List[LoanRecord]]) -> List[LoanRecord]:
    """
    Concatenate per-table results and order by date, newest first.

    Callers should not rely on the relative order of records sharing a date.
    """
    return sorted(chain.from_iterable(batches), key=lambda record: record.date, reverse=True)


def normalize_summary(raw_rows: Iterable[Row]) -> List[SummaryRecord]:
    return [
        SummaryRecord(
            loan_type=to_str(row.get("loan_type")),
            telco=to_str(row.get("telco")),
            record_count=to_int(row.get("record_count")),
            total_gross_lent=to_float(row.get("total_gross_lent")),
            total_principal_recovered=to_float(row.get("total_principal_recovered")),
            total_service_fee_recovered=to_float(row.get("total_service_fee_recovered")),
            total_late_fees_recovered=to_float(row.get("total_late_fees_recovered")),
            total_lending_transactions=to_int(row.get("total_lending_transactions")),
            total_recovery_transactions=to_int(row.get("total_recovery_transactions")),
            avg_qualified_base=to_float(row.get("avg_qualified_base")),
            latest_date=format_date(row.get("latest_date")),
        )
        for row in raw_rows
    ]


def arrears_percentage(total_balance: float, within_tenure: float) -> float:
    """Share of the balance past tenure; 0.0 when there is no balance"""
    if not total_balance:
        return 0.0
    return round((total_balance - within_tenure) / total_balance * 100, 2)


def unrecovered_percentage(total_balance: float, net_recovered_value: float) -> float:
    """Fallback when the percentage table has no row; 0.0 when nothing is outstanding or recovered"""
    denominator = total_balance + net_recovered_value
    if not denominator:
        return 0.0
    return round(total_balance / denominator * 100, 2)


def normalize_npl(raw_rows: Iterable[Row]) -> List[NplRecord]:
    records = []
    for row in raw_rows:
        total_balance = to_float(row.get("total_balance"))
        within_tenure = to_float(row.get("within_tenure"))
        net_recovered_value = to_float(row.get("net_recovered_value"))

        published = row.get("unrecovered_percentage_net")
        unrecovered = (
            to_float(published)
            if published is not None
            else unrecovered_percentage(total_balance, net_recovered_value)
        )

        records.append(
            NplRecord(
                loan_type=to_str(row.get("loan_type")),
                total_balance=total_balance,
                within_tenure=within_tenure,
                arrears_30_days=to_float(row.get("arrears_30_days")),
                arrears_31_60_days=to_float(row.get("arrears_31_60_days")),
                arrears_61_90_days=to_float(row.get("arrears_61_90_days")),
                arrears_91_120_days=to_float(row.get("arrears_91_120_days")),
                arrears_121_150_days=to_float(row.get("arrears_121_150_days")),
                arrears_151_180_days=to_float(row.get("arrears_151_180_days")),
                arrears_181_plus_days=to_float(row.get("arrears_181_plus_days")),
                arrears_percentage=arrears_percentage(total_balance, within_tenure),
                net_recovered_value=net_recovered_value,
                unrecovered_percentage_net=unrecovered,
                report_date=format_date(row.get("report_date")),
            )
        )
    return records
