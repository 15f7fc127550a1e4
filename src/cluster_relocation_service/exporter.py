"""Export of ClusterConfig data to the directory served by the image server."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from . import metrics
from .builders.artifacts import build_cluster_relocation, planned_artifacts, serialize
from .constants import (
    FILE_CLUSTER_RELOCATION,
    FILES_DIR_NAME,
    KIND_CLUSTER_CONFIG,
    LOCK_RETRY_DELAY_SECONDS,
    NAMESPACES_DIR_NAME,
)
from .models import ClusterConfig, ObjectKey
from .result import ReconcileResult
from .services.kube.base import ClusterStore
from .tracing import trace_span
from .utils.errors import ExportError, RelocationServiceError
from .utils.events import emit_files_exported
from .utils.filelock import with_write_lock

logger = logging.getLogger(__name__)


class DataExporter:
    """Writes a ClusterConfig and its secrets under an exclusive directory lock.

    Every ClusterConfig owns ``<data_dir>/namespaces/<namespace>/<name>/``,
    which is the lock scope, with the exported JSON files in its ``files``
    subdirectory. Both the export and the removal of that directory take the
    same lock without blocking; contention is reported as a delayed requeue.
    """

    def __init__(
        self,
        store: ClusterStore,
        data_dir: str | Path,
        lock_retry_delay: float = LOCK_RETRY_DELAY_SECONDS,
    ) -> None:
        self.store = store
        self.data_dir = Path(data_dir)
        self.lock_retry_delay = lock_retry_delay

    def paths(self, key: ObjectKey) -> tuple[Path, Path]:
        """Return the lock directory and files directory for ``key`` without creating them."""
        lock_dir = self.data_dir / NAMESPACES_DIR_NAME / key.namespace / key.name
        return lock_dir, lock_dir / FILES_DIR_NAME

    def export(self, cluster_config: ClusterConfig) -> ReconcileResult:
        """Write every artifact the ClusterConfig references.

        Returns:
            ``done`` once all files are written, or ``requeue_after`` if the
            directory lock is held elsewhere

        Raises:
            ExportError: A referenced secret could not be read or a file could not be written
            LockAcquisitionError: The lock could not be taken for reasons other than contention
        """
        key = cluster_config.key
        lock_dir, files_dir = self.paths(key)
        files_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

        written: list[str] = []

        def write_all() -> None:
            document = build_cluster_relocation(cluster_config)
            if self._write(files_dir / FILE_CLUSTER_RELOCATION, serialize(document)):
                written.append(FILE_CLUSTER_RELOCATION)

            for artifact in planned_artifacts(cluster_config):
                try:
                    secret = self.store.get_secret(artifact.ref)
                except RelocationServiceError as e:
                    raise ExportError(artifact.description, str(e)) from e
                if self._write(files_dir / artifact.file_name, serialize(secret)):
                    written.append(artifact.file_name)

        with trace_span("export_files", kind=KIND_CLUSTER_CONFIG, attributes={"clusterconfig": str(key)}):
            acquired = with_write_lock(lock_dir, write_all)

        if not acquired:
            logger.info(f"Requeueing {key} due to lock contention on {lock_dir}")
            metrics.lock_contention_total.labels(operation="export").inc()
            return ReconcileResult.requeue_after(self.lock_retry_delay)

        if written:
            logger.info(f"Exported {', '.join(written)} for {key}")
            emit_files_exported(cluster_config.body, written)
        return ReconcileResult.done()

    def remove(self, key: ObjectKey) -> ReconcileResult:
        """Remove the export directory of ``key`` under its lock.

        A missing directory is already clean. The directory is never created here.

        Raises:
            OSError: The directory could not be inspected or removed
            LockAcquisitionError: The lock could not be taken for reasons other than contention
        """
        lock_dir, _ = self.paths(key)
        try:
            lock_dir.stat()
        except FileNotFoundError:
            return ReconcileResult.done()

        def remove_all() -> None:
            logger.info(f"Removing files for {key}")
            shutil.rmtree(lock_dir)

        with trace_span("remove_files", kind=KIND_CLUSTER_CONFIG, attributes={"clusterconfig": str(key)}):
            acquired = with_write_lock(lock_dir, remove_all)

        if not acquired:
            logger.info(f"Requeueing deletion of {key} due to lock contention on {lock_dir}")
            metrics.lock_contention_total.labels(operation="remove").inc()
            return ReconcileResult.requeue_after(self.lock_retry_delay)
        return ReconcileResult.done()

    def _write(self, path: Path, data: bytes) -> bool:
        """Write ``data`` to ``path`` unless it already holds exactly those bytes."""
        try:
            if path.is_file() and path.read_bytes() == data:
                return False
            path.write_bytes(data)
            path.chmod(0o644)
        except OSError as e:
            raise ExportError(path.name, str(e)) from e
        metrics.artifacts_written_total.labels(artifact=path.name).inc()
        return True
