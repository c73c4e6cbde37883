"""SQLAlchemy table definitions for the ETL-populated reporting tables (read-only)"""

from sqlalchemy import Column, Date, DateTime, Float, Integer, MetaData, String, Table

metadata = MetaData()


def _loan_data_table(name: str) -> Table:
    """Daily loan activity snapshots for one operator"""
    return Table(
        name,
        metadata,
        Column("load_date", Date, nullable=False, index=True),
        Column("loan_type", String(64)),
        Column("denom", Integer),
        Column("country", String(64)),
        Column("telco", String(32)),
        Column("qualified_base", Integer),
        Column("overall_actives_daily", Integer),
        Column("overall_actives_wtd", Float),
        Column("overall_actives_mtd", Integer),
        Column("overall_actives_ytd", Integer),
        Column("lending_txns", Integer),
        Column("gross_lent", Float),
        Column("sfee_lent", Float),
        Column("late_fees_charged", Float),
        Column("setup_fees_charged", Float),
        Column("interest_fees_charged", Float),
        Column("daily_fees_charged", Float),
        Column("recovery_txns", Integer),
        Column("principal_recovered", Float),
        Column("sfee_recovered", Float),
        Column("late_fees_recovered", Float),
        Column("setup_fees_recovered", Float),
        Column("interest_fees_recovered", Float),
        Column("daily_fees_recovered", Float),
        Column("processed_at", DateTime),
        Column("file_source", String(255)),
    )


airtel_loan_data = _loan_data_table("airtel_loan_data")
mtn_loan_data = _loan_data_table("MTN_loan_data")

LOAN_DATA_COLUMNS = [c.name for c in airtel_loan_data.columns]

# NPL reporting
npl_outstanding_balance = Table(
    "airtel_npl_outstanding_balance_net_summary",
    metadata,
    Column("loan_type", String(64), nullable=False),
    Column("report_date", Date, nullable=False, index=True),
    Column("total_balance", Float),
    Column("within_tenure", Float),
    Column("arrears_30_days", Float),
    Column("arrears_31_60_days", Float),
    Column("arrears_61_90_days", Float),
    Column("arrears_91_120_days", Float),
    Column("arrears_121_150_days", Float),
    Column("arrears_151_180_days", Float),
    Column("arrears_181_plus_days", Float),
)

npl_net_recovered_value = Table(
    "airtel_npl_net_recovered_value_summary",
    metadata,
    Column("loan_type", String(64), nullable=False),
    Column("report_date", Date, nullable=False),
    Column("total_balance", Float),
)

npl_unrecovered_percentage = Table(
    "airtel_npl_unrecovered_percentage_summary",
    metadata,
    Column("loan_type", String(64), nullable=False),
    Column("report_date", Date, nullable=False),
    Column("total_balance", Float),
)
