"""Prometheus metrics for bill payments, statement refreshes and projections"""

from prometheus_client import Counter, Histogram

# Payment metrics
bill_payment_counter = Counter(
    "finance_bill_payments_total",
    "Bill payment mutations",
    ["outcome"],  # paid | partial | reverted | archived
)

payment_rejection_counter = Counter(
    "finance_payment_rejections_total",
    "Payment mutations refused before touching the bill",
    ["reason"],  # exceeds_remaining | invalid_amount | archived | not_paid | conflict
)

# Statement metrics
bills_refreshed_counter = Counter(
    "finance_bills_refreshed_total",
    "Bills written by statement recomputation",
)

projection_months_histogram = Histogram(
    "finance_projection_months",
    "Months returned by the forward projection",
    buckets=[1, 3, 6, 12, 18, 24],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(status: str) -> None:
    """Count a payment by the bill status it produced"""
    outcome = "paid" if status == "paid" else "partial"
    bill_payment_counter.labels(outcome=outcome).inc()
