"""SQL construction for the reporting tables"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Tuple

from sqlalchemy import ColumnElement, String, Table, and_, case, func, select
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql import Select, Subquery
from sqlalchemy.sql.functions import FunctionElement

from loan_dashboard.domain.filters import parse_operator
from loan_dashboard.domain.models import DateRange, LoanQuery, Operator
from loan_dashboard.infrastructure.database.models import (
    LOAN_DATA_COLUMNS,
    airtel_loan_data,
    mtn_loan_data,
    npl_net_recovered_value,
    npl_outstanding_balance,
    npl_unrecovered_percentage,
)
from loan_dashboard.utils.date_utils import trailing_window_start

# Only these tables are ever queried; request input never reaches the SQL text
OPERATOR_TABLES: Dict[Operator, Tuple[Table, ...]] = {
    Operator.AIRTEL: (airtel_loan_data,),
    Operator.MTN: (mtn_loan_data,),
    Operator.BOTH: (airtel_loan_data, mtn_loan_data),
}

TABLE_OPERATORS: Dict[str, Operator] = {
    airtel_loan_data.name: Operator.AIRTEL,
    mtn_loan_data.name: Operator.MTN,
}

# Spellings of the operator name seen in the telco column
OPERATOR_TELCO_NAMES: Dict[Operator, Tuple[str, ...]] = {
    Operator.AIRTEL: ("Airtel", "airtel"),
    Operator.MTN: ("MTN", "mtn"),
}

NPL_LOAN_TYPE_ORDER = ["7 Days Loan", "14 Days Loan", "21 Days Loan", "30 Days Loan", "Grand Total"]

NPL_BALANCE_COLUMNS = [
    "total_balance",
    "within_tenure",
    "arrears_30_days",
    "arrears_31_60_days",
    "arrears_61_90_days",
    "arrears_91_120_days",
    "arrears_121_150_days",
    "arrears_151_180_days",
    "arrears_181_plus_days",
]


@dataclass(frozen=True)
class QueryStatement:
    """One executable statement bound to the physical table it reads"""

    source_table: str
    statement: Select

    @property
    def sql_text(self) -> str:
        return str(self.statement.compile())

    @property
    def bound_params(self) -> Dict[str, Any]:
        return self.statement.compile().params


class case_sensitive(FunctionElement):
    """A text expression compared byte for byte, whatever the column collation"""

    type = String()
    name = "case_sensitive"
    inherit_cache = True


@compiles(case_sensitive)
def _compile_case_sensitive(element, compiler, **kw):
    # SQLite string functions such as instr() already compare bytes
    return compiler.process(element.clauses, **kw)


@compiles(case_sensitive, "mysql")
def _compile_case_sensitive_mysql(element, compiler, **kw):
    return "BINARY %s" % compiler.process(element.clauses, **kw)


def resolve_operator(operator: Operator | str) -> Operator:
    """
    Accept an Operator or its raw name in any letter case.

    Raises:
        InvalidOperatorError: If a raw string is not airtel, mtn or both
    """
    if isinstance(operator, Operator):
        return operator
    return parse_operator(operator)


def source_tables(operator: Operator | str) -> Tuple[Table, ...]:
    """
    Resolve the physical loan-data tables for an operator filter.

    Raises:
        InvalidOperatorError: If a raw string is not airtel, mtn or both
    """
    return OPERATOR_TABLES[resolve_operator(operator)]


def _key_predicates(table: Table, query: LoanQuery, today: date | None) -> List[ColumnElement]:
    """Date and loan-type filters; both touch only snapshot key columns"""
    if isinstance(query.window, DateRange):
        predicates = [table.c.load_date.between(query.window.start, query.window.end)]
    else:
        predicates = [table.c.load_date >= trailing_window_start(query.window.days, today)]

    if query.loan_type:
        # Literal, case-sensitive substring: no LIKE wildcards, no collation folding
        predicates.append(func.instr(case_sensitive(table.c.loan_type), query.loan_type) > 0)
    return predicates


def _latest_snapshots(table: Table, operator: Operator, query: LoanQuery, today: date | None) -> Subquery:
    """
    Filtered rows of `table`, keeping the newest processed_at per (load_date, loan_type, denom).

    Ranking runs inside one table only. Rows without processed_at, loan_type or
    denom never win. Equal processed_at values leave exactly one row, which one
    is up to the engine.
    """
    rank = func.row_number().over(
        partition_by=(table.c.load_date, table.c.loan_type, table.c.denom),
        order_by=table.c.processed_at.desc(),
    )
    ranked = (
        select(*table.c, rank.label("snapshot_rank"))
        .where(
            table.c.processed_at.is_not(None),
            table.c.loan_type.is_not(None),
            table.c.denom.is_not(None),
            *_key_predicates(table, query, today),
        )
        .subquery("ranked")
    )

    latest = select(*[ranked.c[name] for name in LOAN_DATA_COLUMNS]).where(ranked.c.snapshot_rank == 1)

    # Guards against rows of the other operator loaded into the wrong table
    telco_names = OPERATOR_TELCO_NAMES.get(operator)
    if telco_names:
        latest = latest.where(ranked.c.telco.in_(telco_names))

    return latest.subquery("t1")


def build_loan_query(query: LoanQuery, today: date | None = None) -> List[QueryStatement]:
    """
    Build one statement per source table for the loan-data endpoints.

    Each statement is ordered by load_date DESC, loan_type ASC and limited on its own,
    so a both-operator request can return up to twice `query.limit` rows.
    """
    operator = resolve_operator(query.operator)
    statements = []
    for table in source_tables(operator):
        t1 = _latest_snapshots(table, operator, query, today)
        stmt = (
            select(*t1.c)
            .order_by(t1.c.load_date.desc(), t1.c.loan_type.asc())
            .limit(query.limit)
        )
        statements.append(QueryStatement(source_table=table.name, statement=stmt))
    return statements


def build_summary_query(query: LoanQuery, today: date | None = None) -> List[QueryStatement]:
    """Per-table (loan_type, telco) aggregates over the latest snapshots"""
    operator = resolve_operator(query.operator)
    statements = []
    for table in source_tables(operator):
        t1 = _latest_snapshots(table, operator, query, today)
        stmt = (
            select(
                t1.c.loan_type,
                t1.c.telco,
                func.count().label("record_count"),
                func.sum(t1.c.gross_lent).label("total_gross_lent"),
                func.sum(t1.c.principal_recovered).label("total_principal_recovered"),
                func.sum(t1.c.sfee_recovered).label("total_service_fee_recovered"),
                func.sum(t1.c.late_fees_recovered).label("total_late_fees_recovered"),
                func.sum(t1.c.lending_txns).label("total_lending_transactions"),
                func.sum(t1.c.recovery_txns).label("total_recovery_transactions"),
                func.avg(t1.c.qualified_base).label("avg_qualified_base"),
                func.max(t1.c.load_date).label("latest_date"),
            )
            .group_by(t1.c.loan_type, t1.c.telco)
            .order_by(t1.c.loan_type, t1.c.telco)
        )
        statements.append(QueryStatement(source_table=table.name, statement=stmt))
    return statements


def build_npl_query() -> QueryStatement:
    """
    NPL balances for the latest report_date with recovered value and unrecovered percentage.

    The percentage table is matched on its own latest date per loan_type since it
    is published on a separate schedule and may lag the other two.
    """
    o = npl_outstanding_balance.alias("o")
    r = npl_net_recovered_value.alias("r")
    u = npl_unrecovered_percentage.alias("u")
    o_latest = npl_outstanding_balance.alias("o_latest")
    u_latest = npl_unrecovered_percentage.alias("u_latest")

    latest_report_date = select(func.max(o_latest.c.report_date)).scalar_subquery()
    latest_percentage_date = (
        select(func.max(func.date(u_latest.c.report_date)))
        .where(u_latest.c.loan_type == o.c.loan_type)
        .correlate(o)
        .scalar_subquery()
    )

    category_order = case(
        {loan_type: position for position, loan_type in enumerate(NPL_LOAN_TYPE_ORDER, start=1)},
        value=o.c.loan_type,
        else_=len(NPL_LOAN_TYPE_ORDER) + 1,
    )

    joined = o.outerjoin(
        r,
        and_(
            o.c.loan_type == r.c.loan_type,
            func.date(o.c.report_date) == func.date(r.c.report_date),
        ),
    ).outerjoin(
        u,
        and_(
            o.c.loan_type == u.c.loan_type,
            func.date(u.c.report_date) == latest_percentage_date,
        ),
    )

    stmt = (
        select(
            o.c.loan_type,
            *[o.c[name] for name in NPL_BALANCE_COLUMNS],
            o.c.report_date,
            r.c.total_balance.label("net_recovered_value"),
            u.c.total_balance.label("unrecovered_percentage_net"),
        )
        .select_from(joined)
        .where(o.c.report_date == latest_report_date)
        .order_by(category_order, o.c.loan_type)
    )
    return QueryStatement(source_table=npl_outstanding_balance.name, statement=stmt)


def build_status_query(operator: Operator = Operator.BOTH) -> List[QueryStatement]:
    """Latest load_date and row count for each operator table"""
    return [
        QueryStatement(
            source_table=table.name,
            statement=select(
                func.max(table.c.load_date).label("latest_date"),
                func.count().label("total_records"),
            ).select_from(table),
        )
        for table in source_tables(operator)
    ]
