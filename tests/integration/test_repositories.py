"""Integration tests for the reporting repository against SQLite"""

import pytest
from datetime import date, datetime
from sqlalchemy.orm import Session
from loan_dashboard.domain.exceptions import DataAccessError
from loan_dashboard.domain.models import DateRange, DateWindow, LoanQuery, Operator
from loan_dashboard.infrastructure.database.models import (
    airtel_loan_data,
    mtn_loan_data,
    npl_net_recovered_value,
    npl_outstanding_balance,
    npl_unrecovered_percentage,
)
from loan_dashboard.infrastructure.database.repositories import ReportingRepository

TODAY = date(2025, 8, 13)


@pytest.fixture
def repo(db: Session) -> ReportingRepository:
    return ReportingRepository(db, today=TODAY)


def make_query(**overrides) -> LoanQuery:
    fields = {
        "operator": Operator.BOTH,
        "window": DateWindow(days=7),
        "loan_type": None,
        "limit": 1000,
    }
    fields.update(overrides)
    return LoanQuery(**fields)


def test_latest_processing_run_wins(repo, seed, loan_row):
    """Only the newest processed_at per (load_date, loan_type, denom) survives"""
    seed(
        airtel_loan_data,
        loan_row(processed_at=datetime(2025, 8, 7, 2, 0), gross_lent=100.0, file_source="first.csv"),
        loan_row(processed_at=datetime(2025, 8, 7, 9, 30), gross_lent=150.0, file_source="rerun.csv"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL))

    assert len(records) == 1
    assert records[0].file_source == "rerun.csv"
    assert records[0].gross_lent == 150.0


def test_equal_processing_timestamps_keep_exactly_one(repo, seed, loan_row):
    """Which tied row wins is unspecified; exactly one must remain"""
    tied = datetime(2025, 8, 7, 2, 0)
    seed(
        airtel_loan_data,
        loan_row(processed_at=tied, file_source="a.csv"),
        loan_row(processed_at=tied, file_source="b.csv"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL))

    assert len(records) == 1
    assert records[0].file_source in {"a.csv", "b.csv"}


def test_distinct_keys_are_not_collapsed(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(denom=500),
        loan_row(denom=1000),
        loan_row(loan_type="Nano 14D"),
        loan_row(load_date=date(2025, 8, 7)),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL))
    assert len(records) == 4


def test_rows_without_processed_at_lose(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(processed_at=None, file_source="unstamped.csv"),
        loan_row(processed_at=datetime(2025, 8, 7, 2, 0), file_source="stamped.csv"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL))
    assert [r.file_source for r in records] == ["stamped.csv"]


def test_deduplication_is_scoped_per_table(repo, seed, loan_row):
    """The same key in both tables is two separate snapshots"""
    seed(airtel_loan_data, loan_row(processed_at=datetime(2025, 8, 7, 2, 0)))
    seed(mtn_loan_data, loan_row(telco="MTN", processed_at=datetime(2025, 8, 7, 1, 0)))

    records = repo.get_loan_records(make_query(operator=Operator.BOTH))

    assert sorted(r.telco for r in records) == ["Airtel", "MTN"]


def test_both_operators_merge_independently_limited_results(repo, seed, loan_row):
    """Merged size is the sum of each table's limited size, newest date first"""
    seed(
        airtel_loan_data,
        loan_row(load_date=date(2025, 8, 8)),
        loan_row(load_date=date(2025, 8, 10)),
        loan_row(load_date=date(2025, 8, 12)),
    )
    seed(
        mtn_loan_data,
        loan_row(telco="MTN", load_date=date(2025, 8, 9)),
        loan_row(telco="MTN", load_date=date(2025, 8, 11)),
        loan_row(telco="MTN", load_date=date(2025, 8, 13)),
    )

    records = repo.get_loan_records(make_query(operator=Operator.BOTH, limit=2))

    assert len(records) == 4
    assert [r.date for r in records] == ["2025-08-13", "2025-08-12", "2025-08-11", "2025-08-10"]


def test_per_table_order_is_date_desc_then_loan_type(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(load_date=date(2025, 8, 10), loan_type="Nano 7D"),
        loan_row(load_date=date(2025, 8, 10), loan_type="Nano 14D"),
        loan_row(load_date=date(2025, 8, 11), loan_type="Nano 30D"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL))

    assert [(r.date, r.loan_type) for r in records] == [
        ("2025-08-11", "Nano 30D"),
        ("2025-08-10", "Nano 14D"),
        ("2025-08-10", "Nano 7D"),
    ]


def test_single_operator_drops_foreign_telco_rows(repo, seed, loan_row):
    """MTN rows loaded into the Airtel table are ignored for an airtel request"""
    seed(
        airtel_loan_data,
        loan_row(telco="airtel", denom=500),
        loan_row(telco="MTN", denom=1000),
    )

    airtel_only = repo.get_loan_records(make_query(operator=Operator.AIRTEL))
    both = repo.get_loan_records(make_query(operator=Operator.BOTH))

    assert [r.denom for r in airtel_only] == [500]
    assert len(both) == 2


def test_trailing_window_excludes_older_rows(repo, seed, loan_row):
    seed(
        mtn_loan_data,
        loan_row(telco="MTN", load_date=date(2025, 8, 6)),
        loan_row(telco="MTN", load_date=date(2025, 8, 5)),
    )

    records = repo.get_loan_records(make_query(operator=Operator.MTN))

    assert [r.date for r in records] == ["2025-08-06"]


def test_explicit_range_is_inclusive(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        *[loan_row(load_date=date(2025, 7, day)) for day in (1, 2, 3, 4)],
    )

    query = make_query(operator=Operator.AIRTEL, window=DateRange(start=date(2025, 7, 2), end=date(2025, 7, 3)))
    records = repo.get_loan_records(query)

    assert [r.date for r in records] == ["2025-07-03", "2025-07-02"]


def test_loan_type_substring_filter(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(loan_type="Nano 7D"),
        loan_row(loan_type="Nano 14D"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL, loan_type="14D"))
    assert [r.loan_type for r in records] == ["Nano 14D"]


def test_loan_type_filter_is_case_sensitive(repo, seed, loan_row):
    seed(airtel_loan_data, loan_row(loan_type="Nano 14D"))

    assert repo.get_loan_records(make_query(operator=Operator.AIRTEL, loan_type="nano 14d")) == []
    assert repo.get_loan_records(make_query(operator=Operator.AIRTEL, loan_type="nano")) == []
    assert len(repo.get_loan_records(make_query(operator=Operator.AIRTEL, loan_type="Nano"))) == 1


def test_loan_type_filter_treats_wildcards_literally(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(loan_type="Nano_7D"),
        loan_row(loan_type="NanoX7D"),
        loan_row(loan_type="Nano 7D"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL, loan_type="Nano_7D"))
    assert [r.loan_type for r in records] == ["Nano_7D"]

    assert repo.get_loan_records(make_query(operator=Operator.AIRTEL, loan_type="%")) == []


def test_raw_operator_string_drops_foreign_telco_rows(repo, seed, loan_row):
    """An upper-case operator name still filters out the other operator's rows"""
    seed(
        airtel_loan_data,
        loan_row(telco="airtel", denom=500),
        loan_row(telco="MTN", denom=1000),
    )

    records = repo.get_loan_records(make_query(operator="AIRTEL"))

    assert [r.telco for r in records] == ["airtel"]


def test_rows_missing_key_columns_are_dropped(repo, seed, loan_row):
    """Null loan_type or denom cannot identify a snapshot, so such rows never win"""
    seed(
        airtel_loan_data,
        loan_row(loan_type=None, file_source="no_type.csv"),
        loan_row(loan_type=None, file_source="no_type_rerun.csv", processed_at=datetime(2025, 8, 7, 9, 0)),
        loan_row(denom=None, file_source="no_denom.csv"),
        loan_row(file_source="complete.csv"),
    )

    records = repo.get_loan_records(make_query(operator=Operator.AIRTEL))

    assert [r.file_source for r in records] == ["complete.csv"]


def test_failure_in_one_table_fails_whole_request(db, repo, seed, loan_row):
    """No partial merge when the second table cannot be read"""
    seed(airtel_loan_data, loan_row())
    mtn_loan_data.drop(bind=db.connection())

    with pytest.raises(DataAccessError) as exc_info:
        repo.get_loan_records(make_query(operator=Operator.BOTH))

    assert exc_info.value.source_table == "MTN_loan_data"
    assert "MTN_loan_data" in exc_info.value.details


def test_summary_aggregates_latest_snapshots(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(load_date=date(2025, 8, 1), gross_lent=100.0, lending_txns=10, qualified_base=1000),
        loan_row(load_date=date(2025, 8, 2), gross_lent=200.0, lending_txns=20, qualified_base=2000),
        # Earlier run for 2025-08-02, superseded by the one above
        loan_row(
            load_date=date(2025, 8, 2),
            gross_lent=999.0,
            processed_at=datetime(2025, 8, 3, 0, 0),
        ),
    )

    summaries = repo.get_summary(make_query(operator=Operator.AIRTEL, window=DateWindow(days=30)))

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.loan_type == "Nano 7D"
    assert summary.telco == "Airtel"
    assert summary.record_count == 2
    assert summary.total_gross_lent == pytest.approx(300.0)
    assert summary.total_lending_transactions == 30
    assert summary.avg_qualified_base == pytest.approx(1500.0)
    assert summary.latest_date == "2025-08-02"


def test_summary_covers_each_table(repo, seed, loan_row):
    seed(airtel_loan_data, loan_row(load_date=date(2025, 8, 1)))
    seed(mtn_loan_data, loan_row(telco="MTN", load_date=date(2025, 8, 1)))

    summaries = repo.get_summary(make_query(operator=Operator.BOTH, window=DateWindow(days=30)))
    assert [s.telco for s in summaries] == ["Airtel", "MTN"]


def _npl_row(loan_type, report_date, total_balance=1000.0, within_tenure=800.0):
    return {
        "loan_type": loan_type,
        "report_date": report_date,
        "total_balance": total_balance,
        "within_tenure": within_tenure,
        "arrears_30_days": 50.0,
        "arrears_31_60_days": 40.0,
        "arrears_61_90_days": 30.0,
        "arrears_91_120_days": 30.0,
        "arrears_121_150_days": 20.0,
        "arrears_151_180_days": 20.0,
        "arrears_181_plus_days": 10.0,
    }


def test_npl_canonical_loan_type_order(repo, seed):
    report_date = date(2025, 8, 6)
    seed(
        npl_outstanding_balance,
        *[
            _npl_row(loan_type, report_date)
            for loan_type in ["Grand Total", "Other", "30 Days Loan", "7 Days Loan", "21 Days Loan", "14 Days Loan"]
        ],
    )

    records = repo.get_npl_records()

    assert [r.loan_type for r in records] == [
        "7 Days Loan",
        "14 Days Loan",
        "21 Days Loan",
        "30 Days Loan",
        "Grand Total",
        "Other",
    ]


def test_npl_uses_latest_report_date_only(repo, seed):
    seed(
        npl_outstanding_balance,
        _npl_row("7 Days Loan", date(2025, 8, 5), total_balance=1.0),
        _npl_row("7 Days Loan", date(2025, 8, 6), total_balance=2000.0, within_tenure=1500.0),
    )

    (record,) = repo.get_npl_records()

    assert record.report_date == "2025-08-06"
    assert record.total_balance == 2000.0
    assert record.arrears_percentage == 25.0


def test_npl_joins_recovered_and_lagging_percentage(repo, seed):
    """Recovered value matches the report date; the percentage table may be a day behind"""
    seed(npl_outstanding_balance, _npl_row("7 Days Loan", date(2025, 8, 6)))
    seed(
        npl_net_recovered_value,
        {"loan_type": "7 Days Loan", "report_date": date(2025, 8, 5), "total_balance": 1.0},
        {"loan_type": "7 Days Loan", "report_date": date(2025, 8, 6), "total_balance": 300.0},
    )
    seed(
        npl_unrecovered_percentage,
        {"loan_type": "7 Days Loan", "report_date": date(2025, 8, 4), "total_balance": 10.0},
        {"loan_type": "7 Days Loan", "report_date": date(2025, 8, 5), "total_balance": 72.5},
    )

    (record,) = repo.get_npl_records()

    assert record.net_recovered_value == 300.0
    assert record.unrecovered_percentage_net == 72.5


def test_npl_missing_joins_fall_back(repo, seed):
    seed(npl_outstanding_balance, _npl_row("Grand Total", date(2025, 8, 6), total_balance=0.0, within_tenure=0.0))

    (record,) = repo.get_npl_records()

    assert record.net_recovered_value == 0.0
    assert record.unrecovered_percentage_net == 0.0
    assert record.arrears_percentage == 0.0


def test_table_status(repo, seed, loan_row):
    seed(
        airtel_loan_data,
        loan_row(load_date=date(2025, 8, 5)),
        loan_row(load_date=date(2025, 8, 6)),
    )

    status = repo.get_table_status()

    assert status["airtel"].latest_date == "2025-08-06"
    assert status["airtel"].total_records == 2
    assert status["mtn"].latest_date is None
    assert status["mtn"].total_records == 0
