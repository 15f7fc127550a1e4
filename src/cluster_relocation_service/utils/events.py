"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CLEANUP_COMPLETED,
    EVENT_REASON_FILES_EXPORTED,
    EVENT_REASON_HOST_IMAGE_CLEARED,
    EVENT_REASON_HOST_IMAGE_SET,
    EVENT_REASON_RECONCILE_FAILED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Full resource body (apiVersion, kind and metadata are required)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_files_exported(body: dict[str, Any], files: list[str]) -> None:
    """Emit files exported event."""
    emit_event(body, EVENT_REASON_FILES_EXPORTED, f"Exported {', '.join(files)}")


def emit_host_image_set(body: dict[str, Any], host: str, url: str) -> None:
    """Emit host image set event."""
    emit_event(body, EVENT_REASON_HOST_IMAGE_SET, f"BareMetalHost {host} set to boot {url}")


def emit_host_image_cleared(body: dict[str, Any], host: str) -> None:
    """Emit host image cleared event."""
    emit_event(body, EVENT_REASON_HOST_IMAGE_CLEARED, f"Removed image from BareMetalHost {host}")


def emit_cleanup_completed(body: dict[str, Any]) -> None:
    """Emit cleanup completed event."""
    emit_event(body, EVENT_REASON_CLEANUP_COMPLETED, "Exported files and host image removed")
