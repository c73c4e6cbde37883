"""Prometheus metrics for query latency, failures and result volume"""

from prometheus_client import Counter, Histogram

# Reporting store metrics
query_duration_histogram = Histogram(
    "loan_dashboard_query_duration_seconds",
    "Reporting query execution time",
    ["source_table"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

query_failure_counter = Counter(
    "loan_dashboard_query_failures_total",
    "Failed reporting queries",
    ["source_table"],
)

rows_returned_counter = Counter(
    "loan_dashboard_rows_returned_total",
    "Normalized records returned to clients",
    ["endpoint"],  # loan_data | loan_type | summary | npl
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_rows_returned(endpoint: str, count: int) -> None:
    rows_returned_counter.labels(endpoint=endpoint).inc(count)
