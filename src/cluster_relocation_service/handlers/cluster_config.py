"""Handler for ClusterConfig resources."""

from __future__ import annotations

import os
from typing import Any, Callable, Protocol

import kopf

from ..config import ReconcilerOptions, image_url
from ..constants import API_GROUP_VERSION, KIND_CLUSTER_CONFIG
from ..exporter import DataExporter
from ..finalizer import FinalizerLifecycle
from ..hosts import HostImageSynchronizer
from ..models import ClusterConfig, ObjectKey
from ..result import Outcome, ReconcileResult
from ..services.kube.base import ClusterStore
from ..tracing import trace_span
from ..utils.conditions import condition_differs, ready_condition_args, update_condition
from ..utils.context import with_correlation_id
from ..utils.errors import ConfigurationError, NotFoundError, sanitize_exception
from ..utils.events import emit_host_image_set, emit_reconcile_failed
from .base import BaseHandler

Step = Callable[[ClusterConfig], tuple[ReconcileResult, bool]]


class StopFlag(Protocol):
    """Cancellation signal handed to a reconcile run (kopf's ``stopped``)."""

    def is_set(self) -> bool:
        ...


class ClusterConfigHandler(BaseHandler):
    """Reconciles ClusterConfig resources.

    Each run looks the ClusterConfig up by key and then runs the finalizer,
    export and host image steps in that order. A step that asks for a requeue
    or fails ends the run.
    """

    def __init__(self):
        """Initialize ClusterConfig handler."""
        super().__init__(KIND_CLUSTER_CONFIG)
        self.store: ClusterStore | None = None
        self.base_url = ""

    def configure(self, options: ReconcilerOptions, store: ClusterStore) -> None:
        """Wire the handler to its store and settings."""
        self.store = store
        self.base_url = options.base_url
        self.exporter = DataExporter(store, options.data_dir, options.lock_retry_delay)
        self.hosts = HostImageSynchronizer(store)
        self.finalizer = FinalizerLifecycle(store, self.exporter, self.hosts)

    def reconcile(self, key: ObjectKey, stopped: StopFlag | None = None) -> ReconcileResult:
        """Converge the ClusterConfig identified by ``key``.

        Args:
            key: Namespace and name of the ClusterConfig
            stopped: Optional cancellation flag checked before each step

        Returns:
            The merged result of the steps that ran. Errors are returned as
            ``ReconcileResult.failed`` after being logged.
        """
        if self.store is None:
            raise ConfigurationError("ClusterConfig handler used before configure()")

        with with_correlation_id():
            try:
                body = self.store.get_cluster_config(key)
            except NotFoundError:
                # already deleted
                return ReconcileResult.done()
            except Exception as e:
                self.log_error({"name": key.name, "namespace": key.namespace},
                               "Failed to get ClusterConfig", error=e, reason="GetFailed")
                return ReconcileResult.failed(e)

            cluster_config = ClusterConfig(body)
            return self.reconcile_with_metrics(
                cluster_config.metadata,
                lambda: self._run(cluster_config, stopped),
            )

    def _run(self, cluster_config: ClusterConfig, stopped: StopFlag | None) -> ReconcileResult:
        meta = cluster_config.metadata
        self.log_info(meta, "Running reconcile", event="reconcile", reason="ReconcileStarted")

        steps: list[Step] = [self._finalizer_step, self._export_step, self._host_step]
        result = ReconcileResult.done()
        with trace_span("reconcile_cluster_config", kind=self.kind, attributes={"clusterconfig": str(cluster_config.key)}):
            for step in steps:
                if stopped is not None and stopped.is_set():
                    self.log_info(meta, "Reconcile interrupted by shutdown", reason="Stopped")
                    return result.merge(ReconcileResult.requeue())
                try:
                    step_result, stop = step(cluster_config)
                except Exception as e:
                    self.handle_reconciliation_error(cluster_config, e)
                    return result.merge(ReconcileResult.failed(e))
                result = result.merge(step_result)
                if stop or not result.is_zero:
                    break

        if not cluster_config.is_terminating and result.outcome is Outcome.DONE:
            self.set_ready_condition(cluster_config, True, "ClusterConfig reconciled")
        self.log_info(meta, "Reconcile complete", event="reconcile", reason="ReconcileComplete",
                      outcome=result.outcome.name)
        return result

    def _finalizer_step(self, cluster_config: ClusterConfig) -> tuple[ReconcileResult, bool]:
        return self.finalizer.handle(cluster_config)

    def _export_step(self, cluster_config: ClusterConfig) -> tuple[ReconcileResult, bool]:
        result = self.exporter.export(cluster_config)
        if not result.is_zero:
            self.set_ready_condition(cluster_config, None, "Waiting for the export directory lock")
        return result, False

    def _host_step(self, cluster_config: ClusterConfig) -> tuple[ReconcileResult, bool]:
        host_ref = cluster_config.bare_metal_host_ref
        if host_ref is None:
            return ReconcileResult.done(), False
        key = cluster_config.key
        url = image_url(self.base_url, key.namespace, key.name)
        if self.hosts.set_image(host_ref, url):
            self.log_info(cluster_config.metadata, f"Set BareMetalHost {host_ref} image to {url}",
                          reason="HostImageSet", baremetalhost=str(host_ref))
            emit_host_image_set(cluster_config.body, str(host_ref), url)
        return ReconcileResult.done(), False

    def handle_reconciliation_error(self, cluster_config: ClusterConfig, error: Exception) -> None:
        """Report a failed reconcile through logs, events and the Ready condition."""
        sanitized_error = sanitize_exception(error)
        meta = cluster_config.metadata
        self.log_error(meta, f"Reconciliation failed: {sanitized_error}", error=error, reason="ReconciliationFailed")
        emit_reconcile_failed(cluster_config.body, f"Reconciliation failed: {sanitized_error}")
        if not cluster_config.is_terminating:
            self.set_ready_condition(cluster_config, False, sanitized_error)

    def set_ready_condition(self, cluster_config: ClusterConfig, ready: bool | None, message: str) -> None:
        """Patch the Ready condition if it would change.

        A failure to write status is logged and does not mask the reconcile outcome.
        """
        condition_type, status, reason, message = ready_condition_args(ready, message)
        conditions = cluster_config.conditions
        generation = cluster_config.generation
        if not condition_differs(conditions, condition_type, status, reason, message, generation):
            return
        conditions = update_condition(conditions, condition_type, status, reason, message, generation)
        try:
            self.store.patch_cluster_config_status(
                cluster_config.key,
                {"conditions": conditions},
                resource_version=cluster_config.resource_version,
            )
        except Exception as e:
            self.log_error(cluster_config.metadata, "Failed to update status", error=e, reason="StatusUpdateFailed")


def raise_for_result(result: ReconcileResult) -> None:
    """Translate a reconcile result into kopf's retry semantics."""
    if result.outcome is Outcome.ERROR:
        raise result.error
    if result.outcome is Outcome.REQUEUE:
        raise kopf.TemporaryError("requeue requested", delay=0)
    if result.outcome is Outcome.REQUEUE_AFTER:
        raise kopf.TemporaryError("waiting for export directory lock", delay=result.delay)


# Global handler instance
_handler = ClusterConfigHandler()


def get_handler() -> ClusterConfigHandler:
    """Return the process-wide ClusterConfig handler."""
    return _handler


@kopf.on.create(API_GROUP_VERSION, KIND_CLUSTER_CONFIG)
@kopf.on.update(API_GROUP_VERSION, KIND_CLUSTER_CONFIG)
@kopf.on.resume(API_GROUP_VERSION, KIND_CLUSTER_CONFIG)
@kopf.on.delete(API_GROUP_VERSION, KIND_CLUSTER_CONFIG, optional=True)
@kopf.timer(API_GROUP_VERSION, KIND_CLUSTER_CONFIG,
            interval=float(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_cluster_config(
    name: str,
    namespace: str,
    **kwargs: Any,
) -> None:
    """Handle ClusterConfig reconciliation."""
    result = _handler.reconcile(ObjectKey(namespace, name), stopped=kwargs.get("stopped"))
    raise_for_result(result)
