"""Mapping of BareMetalHost changes back to the ClusterConfigs that reference them."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .models import ClusterConfig, ObjectKey
from .services.kube.base import ClusterStore
from .utils.errors import NotFoundError

logger = logging.getLogger(__name__)


def configs_for_host(host_key: ObjectKey, cluster_configs: Iterable[dict[str, Any]]) -> list[ObjectKey]:
    """Return the keys of all ClusterConfigs whose bareMetalHostRef is ``host_key``.

    A host is expected to be referenced by at most one ClusterConfig, but
    every match is returned; more than one is only reported.
    """
    matches = []
    for body in cluster_configs:
        cluster_config = ClusterConfig(body)
        if cluster_config.bare_metal_host_ref == host_key:
            matches.append(cluster_config.key)

    if len(matches) > 1:
        logger.warning(
            f"Found multiple ClusterConfigs referencing BareMetalHost {host_key}: "
            f"{', '.join(str(key) for key in matches)}"
        )
    return matches


def map_host_to_configs(store: ClusterStore, host_key: ObjectKey) -> list[ObjectKey]:
    """Resolve a BareMetalHost change into ClusterConfig reconcile requests.

    A host that no longer exists maps to nothing.
    """
    try:
        store.get_bare_metal_host(host_key)
    except NotFoundError:
        logger.debug(f"BareMetalHost {host_key} no longer exists, nothing to map")
        return []
    return configs_for_host(host_key, store.list_cluster_configs())
