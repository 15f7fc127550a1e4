"""Tests for rate limiting utilities."""

from __future__ import annotations

import time
from unittest.mock import patch

from kubernetes.client.exceptions import ApiException

import cluster_relocation_service.utils.rate_limit as rl
from cluster_relocation_service.utils.rate_limit import (
    handle_rate_limit_error,
    is_rate_limit_error,
    rate_limit_k8s,
)


class TestRateLimitK8s:
    """Test cases for Kubernetes API rate limiting."""

    def test_rate_limit_k8s_decorator(self):
        """Test that k8s rate limiting decorator works."""
        call_count = 0

        @rate_limit_k8s
        def test_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = test_func()
        assert result == "success"
        assert call_count == 1

    def test_rate_limit_k8s_with_args(self):
        """Test rate limiting with function arguments."""
        @rate_limit_k8s
        def test_func(a, b, c=None):
            return f"{a}-{b}-{c}"

        result = test_func("x", "y", c="z")
        assert result == "x-y-z"

    @patch("cluster_relocation_service.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 100.0)
    def test_rate_limit_k8s_enforces_rate(self):
        """Test that rate limiting enforces minimum interval."""
        call_times = []

        @rate_limit_k8s
        def test_func():
            call_times.append(time.time())
            return "ok"

        for _ in range(3):
            test_func()

        # With 100 calls/sec, minimum interval is 0.01 seconds
        assert len(call_times) == 3
        assert call_times[1] - call_times[0] >= 0.009
        assert call_times[2] - call_times[1] >= 0.009

    @patch("cluster_relocation_service.utils.rate_limit.time.sleep")
    def test_rate_limit_k8s_sleeps_when_needed(self, mock_sleep):
        """Test that rate limiter sleeps when calls are too fast."""
        with patch("cluster_relocation_service.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 1.0):
            rl._k8s_last_call_time = 0.0

            @rate_limit_k8s
            def test_func():
                return "ok"

            with patch("cluster_relocation_service.utils.rate_limit.time.time", return_value=10.0):
                test_func()
            mock_sleep.assert_not_called()

            with patch("cluster_relocation_service.utils.rate_limit.time.time", return_value=10.1):
                test_func()

            assert mock_sleep.call_count == 1


class TestIsRateLimitError:
    """Test cases for throttling detection."""

    def test_429(self):
        assert is_rate_limit_error(ApiException(status=429, reason="Too Many Requests"))

    def test_503_with_rate_limit(self):
        assert is_rate_limit_error(ApiException(status=503, reason="Service Unavailable: rate limit exceeded"))

    def test_503_without_rate_limit(self):
        assert not is_rate_limit_error(ApiException(status=503, reason="Service Unavailable"))

    def test_other_exception(self):
        assert not is_rate_limit_error(ValueError("429"))


class TestHandleRateLimitError:
    """Test cases for handling rate limit errors."""

    def test_handle_429_error(self):
        """Test handling 429 rate limit error."""
        error = ApiException(status=429, reason="Too Many Requests")

        with patch("cluster_relocation_service.utils.rate_limit.time.sleep") as mock_sleep:
            result = handle_rate_limit_error(error, attempt=0)

        assert result is True
        mock_sleep.assert_called_once_with(1)

    def test_handle_non_rate_limit_error(self):
        """Test handling non-rate-limit errors."""
        error = ApiException(status=404, reason="Not Found")

        with patch("cluster_relocation_service.utils.rate_limit.time.sleep") as mock_sleep:
            result = handle_rate_limit_error(error, attempt=0)

        assert result is False
        mock_sleep.assert_not_called()

    def test_exponential_backoff(self):
        """Test exponential backoff on retries."""
        error = ApiException(status=429, reason="Too Many Requests")

        with patch("cluster_relocation_service.utils.rate_limit.time.sleep") as mock_sleep:
            for attempt in range(3):
                assert handle_rate_limit_error(error, attempt) is True

        assert [c[0][0] for c in mock_sleep.call_args_list] == [1, 2, 4]

    def test_max_retries_exceeded(self):
        """Test that max retries limit is enforced."""
        error = ApiException(status=429, reason="Too Many Requests")

        with patch("cluster_relocation_service.utils.rate_limit.time.sleep") as mock_sleep:
            result = handle_rate_limit_error(error, attempt=3, max_retries=3)

        assert result is False
        mock_sleep.assert_not_called()

    @patch("cluster_relocation_service.utils.rate_limit.metrics")
    def test_rate_limit_hit_recorded(self, mock_metrics):
        """Test that retried throttling is counted."""
        error = ApiException(status=429, reason="Too Many Requests")

        with patch("cluster_relocation_service.utils.rate_limit.time.sleep"):
            handle_rate_limit_error(error, attempt=0)

        mock_metrics.rate_limit_hits_total.labels.assert_called_once_with(api_type="k8s")
