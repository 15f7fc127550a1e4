"""Utility functions for the Cluster Relocation Service."""

from .conditions import condition_differs, find_condition, update_condition
from .context import get_context_dict, get_correlation_id, with_correlation_id
from .errors import (
    ConfigurationError,
    ConflictError,
    ExportError,
    LockAcquisitionError,
    NotFoundError,
    RelocationServiceError,
    sanitize_exception,
)
from .events import emit_event
from .filelock import with_write_lock
from .rate_limit import handle_rate_limit_error, rate_limit_k8s

__all__ = [
    "update_condition",
    "condition_differs",
    "find_condition",
    "emit_event",
    "with_write_lock",
    "rate_limit_k8s",
    "handle_rate_limit_error",
    "with_correlation_id",
    "get_correlation_id",
    "get_context_dict",
    "sanitize_exception",
    "RelocationServiceError",
    "ConfigurationError",
    "NotFoundError",
    "ConflictError",
    "LockAcquisitionError",
    "ExportError",
]
