"""Kubernetes API implementation of the cluster store."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import client, config

from ... import metrics
from ...constants import (
    API_GROUP,
    API_VERSION,
    BMH_GROUP,
    BMH_VERSION,
    FIELD_MANAGER,
    KIND_BARE_METAL_HOST,
    KIND_CLUSTER_CONFIG,
    PLURAL_BARE_METAL_HOST,
    PLURAL_CLUSTER_CONFIG,
)
from ...models import ObjectKey
from ...utils.errors import ConflictError, NotFoundError
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_k8s

logger = logging.getLogger(__name__)


def load_kube_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesClusterStore:
    """Cluster store backed by the Kubernetes API server."""

    def __init__(self, api_client: client.ApiClient | None = None) -> None:
        """Initialize the store.

        Args:
            api_client: Configured API client; the default client is used when omitted
        """
        self.api_client = api_client or client.ApiClient()
        self.custom = client.CustomObjectsApi(self.api_client)
        self.core = client.CoreV1Api(self.api_client)

    def _call(
        self,
        operation: str,
        kind: str,
        key: ObjectKey | None,
        fn: Callable[..., Any],
        **kwargs: Any,
    ) -> Any:
        """Invoke an API method with throttling, metrics and error translation."""
        start_time = time.time()
        attempt = 0
        try:
            while True:
                try:
                    result = rate_limit_k8s(fn)(**kwargs)
                    metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
                    return result
                except client.exceptions.ApiException as e:
                    if handle_rate_limit_error(e, attempt):
                        attempt += 1
                        continue
                    metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
                    if e.status == 404 and key is not None:
                        raise NotFoundError(kind, key.namespace, key.name) from e
                    if e.status == 409:
                        raise ConflictError(f"{kind} {key} was modified concurrently: {e.reason}") from e
                    raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get_cluster_config(self, key: ObjectKey) -> dict[str, Any]:
        return self._call(
            "get_cluster_config",
            KIND_CLUSTER_CONFIG,
            key,
            self.custom.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=key.namespace,
            plural=PLURAL_CLUSTER_CONFIG,
            name=key.name,
        )

    def list_cluster_configs(self) -> list[dict[str, Any]]:
        result = self._call(
            "list_cluster_configs",
            KIND_CLUSTER_CONFIG,
            None,
            self.custom.list_cluster_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_CLUSTER_CONFIG,
        )
        return list(result.get("items", []))

    def patch_cluster_config(self, key: ObjectKey, patch: dict[str, Any]) -> dict[str, Any]:
        return self._call(
            "patch_cluster_config",
            KIND_CLUSTER_CONFIG,
            key,
            self.custom.patch_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=key.namespace,
            plural=PLURAL_CLUSTER_CONFIG,
            name=key.name,
            body=patch,
            field_manager=FIELD_MANAGER,
        )

    def patch_cluster_config_status(
        self,
        key: ObjectKey,
        status: dict[str, Any],
        resource_version: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"status": status}
        if resource_version:
            body["metadata"] = {"resourceVersion": resource_version}
        return self._call(
            "patch_cluster_config_status",
            KIND_CLUSTER_CONFIG,
            key,
            self.custom.patch_namespaced_custom_object_status,
            group=API_GROUP,
            version=API_VERSION,
            namespace=key.namespace,
            plural=PLURAL_CLUSTER_CONFIG,
            name=key.name,
            body=body,
            field_manager=FIELD_MANAGER,
        )

    def get_secret(self, key: ObjectKey) -> dict[str, Any]:
        secret = self._call(
            "get_secret",
            "Secret",
            key,
            self.core.read_namespaced_secret,
            name=key.name,
            namespace=key.namespace,
        )
        body = self.api_client.sanitize_for_serialization(secret)
        # Typed reads leave the type information empty
        body.setdefault("apiVersion", "v1")
        body.setdefault("kind", "Secret")
        return body

    def get_bare_metal_host(self, key: ObjectKey) -> dict[str, Any]:
        return self._call(
            "get_bare_metal_host",
            KIND_BARE_METAL_HOST,
            key,
            self.custom.get_namespaced_custom_object,
            group=BMH_GROUP,
            version=BMH_VERSION,
            namespace=key.namespace,
            plural=PLURAL_BARE_METAL_HOST,
            name=key.name,
        )

    def patch_bare_metal_host(self, key: ObjectKey, patch: dict[str, Any]) -> dict[str, Any]:
        return self._call(
            "patch_bare_metal_host",
            KIND_BARE_METAL_HOST,
            key,
            self.custom.patch_namespaced_custom_object,
            group=BMH_GROUP,
            version=BMH_VERSION,
            namespace=key.namespace,
            plural=PLURAL_BARE_METAL_HOST,
            name=key.name,
            body=patch,
            field_manager=FIELD_MANAGER,
        )
