"""Prometheus metrics for the Cluster Relocation Service."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "cluster_relocation_service_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "cluster_relocation_service_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "cluster_relocation_service_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# Export metrics
lock_contention_total = Counter(
    "cluster_relocation_service_lock_contention_total",
    "Number of times an export directory lock was held elsewhere",
    ["operation"],
)

artifacts_written_total = Counter(
    "cluster_relocation_service_artifacts_written_total",
    "Total number of exported artifact files written",
    ["artifact"],
)

# BareMetalHost metrics
host_patches_total = Counter(
    "cluster_relocation_service_host_patches_total",
    "Total number of BareMetalHost patches issued",
    ["operation"],
)

# API call metrics
api_call_total = Counter(
    "cluster_relocation_service_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "cluster_relocation_service_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "cluster_relocation_service_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)
