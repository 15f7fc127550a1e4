"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_READY,
    REASON_RECONCILE_FAILED,
    REASON_RECONCILE_IN_PROGRESS,
    REASON_RECONCILE_SUCCEEDED,
)

# Fields compared when deciding whether a condition actually changed
_SIGNIFICANT_FIELDS = ("status", "reason", "message", "observedGeneration")


def find_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    """Return the condition of the given type, if present."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    updated = [dict(cond) for cond in conditions]
    for idx, cond in enumerate(updated):
        if cond.get("type") == condition_type:
            # Only update lastTransitionTime if status changed
            if cond.get("status") == status:
                new_condition["lastTransitionTime"] = cond.get("lastTransitionTime", now)
            updated[idx] = new_condition
            break
    else:
        updated.append(new_condition)

    return updated


def condition_differs(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> bool:
    """Check whether setting the condition would change anything visible."""
    existing = find_condition(conditions, condition_type)
    if existing is None:
        return True
    desired = {
        "status": status,
        "reason": reason,
        "message": message,
        "observedGeneration": observed_generation,
    }
    return any(existing.get(field) != desired[field] for field in _SIGNIFICANT_FIELDS)


def ready_condition_args(ready: bool | None, message: str) -> tuple[str, str, str, str]:
    """Build (type, status, reason, message) for the Ready condition.

    ``ready=None`` means reconciliation is waiting on something transient.
    """
    if ready is None:
        return COND_READY, "False", REASON_RECONCILE_IN_PROGRESS, message
    if ready:
        return COND_READY, "True", REASON_RECONCILE_SUCCEEDED, message
    return COND_READY, "False", REASON_RECONCILE_FAILED, message
