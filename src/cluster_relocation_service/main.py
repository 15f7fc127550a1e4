"""Main entry point for the Cluster Relocation Service operator.

Run with ``kopf run -m cluster_relocation_service.main``.
"""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .config import ReconcilerOptions
from .handlers.cluster_config import get_handler
from .services.kube.client import KubernetesClusterStore, load_kube_config
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator.

    A ConfigurationError raised here aborts the operator before any resource is handled.
    """
    structured_logging.setup_structured_logging()
    initialize_tracing()

    options = ReconcilerOptions.from_env()

    load_kube_config()
    get_handler().configure(options, KubernetesClusterStore())

    # Keep kopf's bookkeeping out of the status subresource
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = 4

    # Serve metrics and health check endpoints
    health.start_metrics_server(options.metrics_port)
    health.mark_ready()

    logger.info(
        f"Exporting to {options.data_dir}, serving images from {options.base_url}"
    )


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not ready while the operator shuts down."""
    health.mark_not_ready()
