"""Data access layer for the reporting tables"""

import logging
from datetime import date
from typing import Dict, List, Sequence

from sqlalchemy import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loan_dashboard.domain.exceptions import DataAccessError
from loan_dashboard.domain.models import LoanQuery, LoanRecord, NplRecord, Operator, SummaryRecord, TableStatus
from loan_dashboard.domain.normalizer import merge_records, normalize, normalize_npl, normalize_summary, to_int
from loan_dashboard.infrastructure.database.queries import (
    TABLE_OPERATORS,
    QueryStatement,
    build_loan_query,
    build_npl_query,
    build_status_query,
    build_summary_query,
)
from loan_dashboard.infrastructure.observability.metrics import query_duration_histogram, query_failure_counter
from loan_dashboard.utils.date_utils import format_date

logger = logging.getLogger(__name__)


class ReportingRepository:
    """Read-only repository over the ETL-populated loan and NPL tables"""

    def __init__(self, db: Session, today: date | None = None):
        self.db = db
        self.today = today

    def _execute(self, statement: QueryStatement) -> Sequence[RowMapping]:
        """
        Run one statement and return its rows as mappings.

        Raises:
            DataAccessError: Wrapping any driver or SQL error, with the driver message as details
        """
        try:
            with query_duration_histogram.labels(source_table=statement.source_table).time():
                return self.db.execute(statement.statement).mappings().all()
        except SQLAlchemyError as e:
            query_failure_counter.labels(source_table=statement.source_table).inc()
            details = str(getattr(e, "orig", None) or e)
            logger.error(
                f"Query against {statement.source_table} failed: {details}",
                extra={"source_table": statement.source_table},
            )
            raise DataAccessError(
                f"Query against {statement.source_table} failed",
                details=details,
                source_table=statement.source_table,
            ) from e

    def get_loan_records(self, query: LoanQuery) -> List[LoanRecord]:
        """
        Fetch latest-snapshot loan rows from every table the operator filter selects.

        Any table failing fails the whole call; partial merges are never returned.
        """
        statements = build_loan_query(query, today=self.today)
        batches = [normalize(self._execute(statement)) for statement in statements]
        return merge_records(batches)

    def get_summary(self, query: LoanQuery) -> List[SummaryRecord]:
        """Fetch (loan_type, telco) aggregates, airtel table first"""
        summaries: List[SummaryRecord] = []
        for statement in build_summary_query(query, today=self.today):
            summaries.extend(normalize_summary(self._execute(statement)))
        return summaries

    def get_npl_records(self) -> List[NplRecord]:
        """Fetch NPL balances for the latest report date in canonical loan_type order"""
        return normalize_npl(self._execute(build_npl_query()))

    def get_table_status(self) -> Dict[str, TableStatus]:
        """Latest load_date and row count keyed by operator name"""
        status = {}
        for statement in build_status_query(Operator.BOTH):
            rows = self._execute(statement)
            row = rows[0] if rows else {}
            latest = format_date(row.get("latest_date"))
            status[TABLE_OPERATORS[statement.source_table].value] = TableStatus(
                latest_date=latest or None,
                total_records=to_int(row.get("total_records")),
            )
        return status
