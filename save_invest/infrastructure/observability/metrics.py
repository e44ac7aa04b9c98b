"""Prometheus metrics for classification outcomes, plans, and collaborator health"""

from prometheus_client import Counter, Histogram

# Classification metrics
classification_counter = Counter(
    "save_invest_classification_total",
    "Expense necessity classifications",
    ["source", "outcome"],  # source: override | keyword | amount_outlier | category_default
)

data_quality_warning_counter = Counter(
    "save_invest_data_quality_warnings_total",
    "Classifications made with a clamped or missing amount",
)

override_write_counter = Counter(
    "save_invest_override_writes_total",
    "Manual classification overrides persisted",
    ["status"],  # saved | failed
)

# Planning metrics
plan_counter = Counter(
    "save_invest_plan_total",
    "Savings and investment plans generated",
    ["risk_tolerance"],
)

plan_vehicle_count_histogram = Histogram(
    "save_invest_plan_vehicles",
    "Vehicles allocated per plan",
    buckets=[0, 1, 2, 3, 4],
)

# Collaborator metrics
market_data_failures_counter = Counter(
    "market_data_failures_total",
    "Failed market data API calls",
)

store_fallback_counter = Counter(
    "store_fallback_total",
    "Storage operations that fell back to defaults",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_classification(source: str, is_necessary: bool, warning_count: int = 0) -> None:
    """Record classification metrics for monitoring rule usage"""
    outcome = "necessary" if is_necessary else "discretionary"
    classification_counter.labels(source=source, outcome=outcome).inc()
    if warning_count:
        data_quality_warning_counter.inc()


def record_plan(risk_tolerance: str, vehicle_count: int) -> None:
    plan_counter.labels(risk_tolerance=risk_tolerance).inc()
    plan_vehicle_count_histogram.observe(vehicle_count)
