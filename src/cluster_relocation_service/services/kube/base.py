"""Cluster store interface."""

from __future__ import annotations

from typing import Any, Protocol

from ...models import ObjectKey


class ClusterStore(Protocol):
    """Protocol defining the cluster reads and writes the reconciler needs.

    Missing objects raise ``NotFoundError``. Patches are JSON merge patches;
    a patch carrying ``metadata.resourceVersion`` is rejected with
    ``ConflictError`` if the object changed since that version was read.
    """

    def get_cluster_config(self, key: ObjectKey) -> dict[str, Any]:
        """Get a ClusterConfig."""
        ...

    def list_cluster_configs(self) -> list[dict[str, Any]]:
        """List ClusterConfigs in all namespaces."""
        ...

    def patch_cluster_config(self, key: ObjectKey, patch: dict[str, Any]) -> dict[str, Any]:
        """Merge-patch a ClusterConfig (metadata and spec)."""
        ...

    def patch_cluster_config_status(
        self,
        key: ObjectKey,
        status: dict[str, Any],
        resource_version: str | None = None,
    ) -> dict[str, Any]:
        """Merge-patch the status subresource of a ClusterConfig, guarded by ``resource_version`` if given."""
        ...

    def get_secret(self, key: ObjectKey) -> dict[str, Any]:
        """Get a Secret as a serialized v1/Secret document."""
        ...

    def get_bare_metal_host(self, key: ObjectKey) -> dict[str, Any]:
        """Get a BareMetalHost."""
        ...

    def patch_bare_metal_host(self, key: ObjectKey, patch: dict[str, Any]) -> dict[str, Any]:
        """Merge-patch a BareMetalHost."""
        ...
