"""Boot image management for BareMetalHosts referenced by ClusterConfigs."""

from __future__ import annotations

import logging
from typing import Any

from . import metrics
from .constants import BMH_DISK_FORMAT_LIVE_ISO, KIND_BARE_METAL_HOST
from .models import ObjectKey
from .services.kube.base import ClusterStore
from .tracing import trace_span

logger = logging.getLogger(__name__)


def image_patch(host: dict[str, Any], url: str) -> dict[str, Any] | None:
    """Compute the minimal merge patch making ``host`` boot the live ISO at ``url``.

    Only ``spec.online``, ``spec.image.url`` and ``spec.image.format`` are
    considered. Returns None when the host already matches.
    """
    spec = host.get("spec") or {}
    image = spec.get("image") or {}

    spec_patch: dict[str, Any] = {}
    if spec.get("online") is not True:
        spec_patch["online"] = True

    image_changes = {}
    if image.get("url") != url:
        image_changes["url"] = url
    if image.get("format") != BMH_DISK_FORMAT_LIVE_ISO:
        image_changes["format"] = BMH_DISK_FORMAT_LIVE_ISO
    if image_changes:
        spec_patch["image"] = image_changes

    if not spec_patch:
        return None
    return _conditional({"spec": spec_patch}, host)


def clear_image_patch(host: dict[str, Any]) -> dict[str, Any] | None:
    """Compute the merge patch removing the boot image, or None if there is none."""
    spec = host.get("spec") or {}
    if not spec.get("image"):
        return None
    return _conditional({"spec": {"image": None}}, host)


def _conditional(patch: dict[str, Any], host: dict[str, Any]) -> dict[str, Any]:
    resource_version = (host.get("metadata") or {}).get("resourceVersion")
    if resource_version:
        patch["metadata"] = {"resourceVersion": resource_version}
    return patch


class HostImageSynchronizer:
    """Points BareMetalHosts at generated images and removes them again."""

    def __init__(self, store: ClusterStore) -> None:
        self.store = store

    def set_image(self, ref: ObjectKey, url: str) -> bool:
        """Make the host boot ``url`` as a live ISO.

        Returns:
            Whether a patch was issued

        Raises:
            NotFoundError: The host does not exist
            ConflictError: The host changed while being patched
        """
        with trace_span("set_host_image", kind=KIND_BARE_METAL_HOST, attributes={"baremetalhost": str(ref)}):
            host = self.store.get_bare_metal_host(ref)
            patch = image_patch(host, url)
            if patch is None:
                return False
            logger.info(f"Setting image of BareMetalHost {ref} to {url}")
            self.store.patch_bare_metal_host(ref, patch)
            metrics.host_patches_total.labels(operation="set_image").inc()
            return True

    def clear_image(self, ref: ObjectKey) -> bool:
        """Remove the boot image from the host.

        Returns:
            Whether a patch was issued

        Raises:
            NotFoundError: The host does not exist
            ConflictError: The host changed while being patched
        """
        with trace_span("clear_host_image", kind=KIND_BARE_METAL_HOST, attributes={"baremetalhost": str(ref)}):
            host = self.store.get_bare_metal_host(ref)
            patch = clear_image_patch(host)
            if patch is None:
                return False
            logger.info(f"Removing image from BareMetalHost {ref}")
            self.store.patch_bare_metal_host(ref, patch)
            metrics.host_patches_total.labels(operation="clear_image").inc()
            return True
