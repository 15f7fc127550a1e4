"""Tests for the finalizer lifecycle."""

from __future__ import annotations

import pytest

from cluster_relocation_service.constants import FINALIZER
from cluster_relocation_service.exporter import DataExporter
from cluster_relocation_service.finalizer import (
    FinalizerLifecycle,
    add_finalizer_patch,
    remove_finalizer_patch,
)
from cluster_relocation_service.hosts import HostImageSynchronizer
from cluster_relocation_service.models import ClusterConfig, ObjectKey
from cluster_relocation_service.result import Outcome
from fakes import hold_lock, make_cluster_config, make_host

KEY = ObjectKey("ns", "foo")
HOST = ObjectKey("hosts", "host")
HOST_REF = {"name": "host", "namespace": "hosts"}


@pytest.fixture
def lifecycle(store, tmp_path):
    exporter = DataExporter(store, tmp_path)
    return FinalizerLifecycle(store, exporter, HostImageSynchronizer(store))


def _stored(store):
    return ClusterConfig(store.get_cluster_config(KEY))


class TestFinalizerPatches:
    """Test cases for the finalizer patch builders."""

    def test_add(self):
        body = make_cluster_config(finalizers=["other"])
        body["metadata"]["resourceVersion"] = "3"

        assert add_finalizer_patch(ClusterConfig(body)) == {
            "metadata": {"finalizers": ["other", FINALIZER], "resourceVersion": "3"},
        }

    def test_add_present(self):
        assert add_finalizer_patch(ClusterConfig(make_cluster_config(finalizers=[FINALIZER]))) is None

    def test_remove_keeps_others(self):
        cluster_config = ClusterConfig(make_cluster_config(finalizers=["other", FINALIZER]))

        assert remove_finalizer_patch(cluster_config) == {"metadata": {"finalizers": ["other"]}}

    def test_remove_last(self):
        cluster_config = ClusterConfig(make_cluster_config(finalizers=[FINALIZER]))

        assert remove_finalizer_patch(cluster_config) == {"metadata": {"finalizers": None}}


class TestFinalizerLifecycle:
    """Test cases for FinalizerLifecycle.handle."""

    def test_adds_finalizer_and_stops(self, lifecycle, store, tmp_path):
        """Test that the first pass only adds the finalizer."""
        store.add_cluster_config(make_cluster_config())

        result, stop = lifecycle.handle(_stored(store))

        assert result.outcome is Outcome.REQUEUE
        assert stop is True
        assert _stored(store).has_finalizer
        assert not (tmp_path / "namespaces").exists()

    def test_present_finalizer_continues(self, lifecycle, store):
        store.add_cluster_config(make_cluster_config(finalizers=[FINALIZER]))

        result, stop = lifecycle.handle(_stored(store))

        assert result.is_zero
        assert stop is False
        assert store.patches == []

    def test_terminating_without_finalizer(self, lifecycle, store):
        """Test that a deletion we do not own is left alone."""
        store.add_cluster_config(make_cluster_config(finalizers=["other"]))
        store.mark_deleted(KEY)

        result, stop = lifecycle.handle(_stored(store))

        assert result.is_zero
        assert stop is True
        assert store.patches == []

    def test_cleanup(self, lifecycle, store, tmp_path, events):
        """Test that cleanup removes files and the host image before the finalizer."""
        store.add_host(make_host(online=True, image={"url": "http://x", "format": "live-iso"}))
        store.add_cluster_config(make_cluster_config(finalizers=[FINALIZER], bareMetalHostRef=HOST_REF))
        lifecycle.exporter.export(_stored(store))
        store.mark_deleted(KEY)

        result, stop = lifecycle.handle(_stored(store))

        assert result.is_zero
        assert stop is True
        assert not (tmp_path / "namespaces" / "ns" / "foo").exists()
        assert "image" not in store.hosts[HOST]["spec"]
        assert store.hosts[HOST]["spec"]["online"] is True
        assert KEY not in store.cluster_configs
        reasons = [c[1]["reason"] for c in events.call_args_list]
        assert reasons[-2:] == ["HostImageCleared", "CleanupCompleted"]

    def test_cleanup_missing_host(self, lifecycle, store, caplog):
        """Test that a vanished host does not block deletion."""
        store.add_cluster_config(make_cluster_config(finalizers=[FINALIZER], bareMetalHostRef=HOST_REF))
        store.mark_deleted(KEY)

        result, _ = lifecycle.handle(_stored(store))

        assert result.is_zero
        assert KEY not in store.cluster_configs
        assert "does not exist" in caplog.text

    def test_cleanup_keeps_other_finalizers(self, lifecycle, store):
        store.add_cluster_config(make_cluster_config(finalizers=["other", FINALIZER]))
        store.mark_deleted(KEY)

        lifecycle.handle(_stored(store))

        assert store.cluster_configs[KEY]["metadata"]["finalizers"] == ["other"]

    def test_cleanup_lock_contention(self, lifecycle, store, tmp_path):
        """Test that the finalizer stays while the directory lock is held."""
        store.add_cluster_config(make_cluster_config(finalizers=[FINALIZER]))
        lifecycle.exporter.export(_stored(store))
        store.mark_deleted(KEY)

        with hold_lock(tmp_path / "namespaces" / "ns" / "foo"):
            result, stop = lifecycle.handle(_stored(store))

        assert result.outcome is Outcome.REQUEUE_AFTER
        assert stop is True
        assert _stored(store).has_finalizer
