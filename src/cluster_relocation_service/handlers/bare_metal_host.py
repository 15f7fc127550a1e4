"""Watch on BareMetalHosts that re-queues the ClusterConfigs referencing them."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from ..constants import ANNOTATION_HOST_GENERATION, BMH_GROUP_VERSION, KIND_BARE_METAL_HOST
from ..mapping import map_host_to_configs
from ..models import ClusterConfig, ObjectKey
from ..services.kube.base import ClusterStore
from ..utils.cache import get_cached_object, invalidate_cache, make_cache_key, set_cached_object
from ..utils.errors import NotFoundError
from .cluster_config import get_handler

logger = logging.getLogger(__name__)


def request_reconcile(store: ClusterStore, key: ObjectKey, marker: str) -> bool:
    """Ask kopf to reconcile ``key`` by annotating it with ``marker``.

    The annotation change is delivered to the ClusterConfig's own update
    handler, so the reconcile runs serialized with its other handlers and
    gets their retries. Terminating or vanished configs are skipped.

    Returns:
        Whether the ClusterConfig was patched
    """
    try:
        cluster_config = ClusterConfig(store.get_cluster_config(key))
        if cluster_config.is_terminating:
            return False
        if cluster_config.annotations.get(ANNOTATION_HOST_GENERATION) == marker:
            return False
        store.patch_cluster_config(key, {"metadata": {"annotations": {ANNOTATION_HOST_GENERATION: marker}}})
    except NotFoundError:
        return False
    return True


def enqueue_for_host(host_key: ObjectKey, generation: Any) -> list[ObjectKey]:
    """Request a reconcile of every ClusterConfig that references ``host_key``.

    Returns:
        Keys of the ClusterConfigs that were re-queued
    """
    store = get_handler().store
    marker = str(generation)
    return [key for key in map_host_to_configs(store, host_key) if request_reconcile(store, key, marker)]


@kopf.on.event(BMH_GROUP_VERSION, KIND_BARE_METAL_HOST)
def handle_bare_metal_host_event(
    name: str,
    namespace: str,
    body: Any,
    **kwargs: Any,
) -> None:
    """Handle BareMetalHost watch events.

    Only spec changes (a new ``metadata.generation``) are mapped; status-only
    updates of an already handled generation are ignored.
    """
    cache_key = make_cache_key(KIND_BARE_METAL_HOST, namespace, name)
    if kwargs.get("type") == "DELETED":
        invalidate_cache(cache_key)
        return

    generation = (body.get("metadata") or {}).get("generation")
    if generation is not None and get_cached_object(cache_key) == generation:
        return

    enqueued = enqueue_for_host(ObjectKey(namespace, name), generation)
    set_cached_object(cache_key, generation)
    for key in enqueued:
        logger.info(f"Requested reconcile of ClusterConfig {key} after BareMetalHost {namespace}/{name} changed")
