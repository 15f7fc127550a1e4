"""Tests for Prometheus metrics."""

from __future__ import annotations

from cluster_relocation_service.metrics import (
    api_call_duration_seconds,
    api_call_total,
    artifacts_written_total,
    error_total,
    host_patches_total,
    lock_contention_total,
    rate_limit_hits_total,
    reconcile_duration_seconds,
    reconcile_total,
)


class TestMetricsExist:
    """Test that all expected metrics are defined."""

    def test_reconcile_total_exists(self):
        """Test reconcile_total counter exists."""
        # Prometheus counters don't include "_total" in their _name attribute
        assert reconcile_total._name == "cluster_relocation_service_reconcile"

    def test_reconcile_duration_exists(self):
        """Test reconcile_duration_seconds histogram exists."""
        assert reconcile_duration_seconds._name == "cluster_relocation_service_reconcile_duration_seconds"

    def test_lock_contention_total_exists(self):
        """Test lock_contention_total counter exists."""
        assert lock_contention_total._name == "cluster_relocation_service_lock_contention"

    def test_artifacts_written_total_exists(self):
        """Test artifacts_written_total counter exists."""
        assert artifacts_written_total._name == "cluster_relocation_service_artifacts_written"

    def test_host_patches_total_exists(self):
        """Test host_patches_total counter exists."""
        assert host_patches_total._name == "cluster_relocation_service_host_patches"

    def test_api_call_metrics_exist(self):
        """Test API call metrics exist."""
        assert api_call_total._name == "cluster_relocation_service_api_call"
        assert api_call_duration_seconds._name == "cluster_relocation_service_api_call_duration_seconds"

    def test_rate_limit_hits_total_exists(self):
        """Test rate_limit_hits_total counter exists."""
        assert rate_limit_hits_total._name == "cluster_relocation_service_rate_limit_hits"

    def test_error_total_exists(self):
        """Test error_total counter exists."""
        assert error_total._name == "cluster_relocation_service_error"


class TestMetricLabels:
    """Test that metrics have correct labels."""

    def test_reconcile_labels(self):
        reconcile_total.labels(kind="ClusterConfig", result="success").inc(0)
        reconcile_duration_seconds.labels(kind="ClusterConfig").observe(0.1)
        error_total.labels(kind="ClusterConfig", error_type="ExportError").inc(0)

    def test_export_labels(self):
        lock_contention_total.labels(operation="export").inc(0)
        artifacts_written_total.labels(artifact="pull-secret-secret.json").inc(0)

    def test_host_labels(self):
        host_patches_total.labels(operation="set_image").inc(0)

    def test_api_call_labels(self):
        api_call_total.labels(api_type="k8s", operation="get_secret", result="success").inc(0)
        api_call_duration_seconds.labels(api_type="k8s", operation="get_secret").observe(0.05)
        rate_limit_hits_total.labels(api_type="k8s").inc(0)


class TestMetricOperations:
    """Test metric operations."""

    def test_counter_increment(self):
        """Test that counters can be incremented."""
        initial = lock_contention_total.labels(operation="test")._value.get()

        lock_contention_total.labels(operation="test").inc()

        assert lock_contention_total.labels(operation="test")._value.get() == initial + 1

    def test_different_label_values_independent(self):
        """Test that metrics with different labels are independent."""
        first = host_patches_total.labels(operation="test1")
        second = host_patches_total.labels(operation="test2")
        first_initial = first._value.get()
        second_initial = second._value.get()

        first.inc(3)
        second.inc(5)

        assert first._value.get() == first_initial + 3
        assert second._value.get() == second_initial + 5
