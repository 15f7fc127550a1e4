"""Finalizer-driven lifecycle of ClusterConfig resources."""

from __future__ import annotations

import logging
from typing import Any

from .constants import FINALIZER, KIND_CLUSTER_CONFIG
from .exporter import DataExporter
from .hosts import HostImageSynchronizer
from .models import ClusterConfig
from .result import ReconcileResult
from .services.kube.base import ClusterStore
from .tracing import trace_span
from .utils.errors import NotFoundError
from .utils.events import emit_cleanup_completed, emit_host_image_cleared

logger = logging.getLogger(__name__)


def add_finalizer_patch(cluster_config: ClusterConfig) -> dict[str, Any] | None:
    """Merge patch adding the finalizer, or None if it is already present."""
    if cluster_config.has_finalizer:
        return None
    return _finalizers_patch(cluster_config, cluster_config.finalizers + [FINALIZER])


def remove_finalizer_patch(cluster_config: ClusterConfig) -> dict[str, Any] | None:
    """Merge patch removing the finalizer, or None if it is absent."""
    if not cluster_config.has_finalizer:
        return None
    remaining = [f for f in cluster_config.finalizers if f != FINALIZER]
    return _finalizers_patch(cluster_config, remaining or None)


def _finalizers_patch(cluster_config: ClusterConfig, finalizers: list[str] | None) -> dict[str, Any]:
    metadata: dict[str, Any] = {"finalizers": finalizers}
    if cluster_config.resource_version:
        metadata["resourceVersion"] = cluster_config.resource_version
    return {"metadata": metadata}


class FinalizerLifecycle:
    """Decides between normal convergence and cleanup for a ClusterConfig.

    While the resource is active the finalizer is added before anything else
    happens. Once it is marked for deletion the export directory and the
    host's boot image are removed, and only then the finalizer.
    """

    def __init__(
        self,
        store: ClusterStore,
        exporter: DataExporter,
        hosts: HostImageSynchronizer,
    ) -> None:
        self.store = store
        self.exporter = exporter
        self.hosts = hosts

    def handle(self, cluster_config: ClusterConfig) -> tuple[ReconcileResult, bool]:
        """Run the finalizer step.

        Returns:
            The step result and whether the remaining reconcile steps must be skipped

        Raises:
            Any error from the store, the filesystem or the lock; the finalizer
            is left in place when one is raised.
        """
        if not cluster_config.is_terminating:
            patch = add_finalizer_patch(cluster_config)
            if patch is None:
                return ReconcileResult.done(), False
            logger.info(f"Adding finalizer to ClusterConfig {cluster_config.key}")
            self.store.patch_cluster_config(cluster_config.key, patch)
            return ReconcileResult.requeue(), True

        if not cluster_config.has_finalizer:
            return ReconcileResult.done(), True

        with trace_span("cleanup", kind=KIND_CLUSTER_CONFIG, attributes={"clusterconfig": str(cluster_config.key)}):
            return self._cleanup(cluster_config), True

    def _cleanup(self, cluster_config: ClusterConfig) -> ReconcileResult:
        key = cluster_config.key

        result = self.exporter.remove(key)
        if not result.is_zero:
            return result

        host_ref = cluster_config.bare_metal_host_ref
        if host_ref is not None:
            try:
                if self.hosts.clear_image(host_ref):
                    emit_host_image_cleared(cluster_config.body, str(host_ref))
            except NotFoundError:
                logger.warning(f"Referenced BareMetalHost {host_ref} does not exist")

        logger.info(f"Removing finalizer from ClusterConfig {key}")
        patch = remove_finalizer_patch(cluster_config)
        if patch is not None:
            self.store.patch_cluster_config(key, patch)
        emit_cleanup_completed(cluster_config.body)
        return ReconcileResult.done()
