"""Tests for BareMetalHost image management."""

from __future__ import annotations

import pytest

from cluster_relocation_service.hosts import HostImageSynchronizer, clear_image_patch, image_patch
from cluster_relocation_service.models import ObjectKey
from cluster_relocation_service.utils.errors import ConflictError, NotFoundError
from fakes import make_host

URL = "http://svc.svc-ns:8000/images/ns/foo.iso"
HOST = ObjectKey("hosts", "host")


class TestImagePatch:
    """Test cases for image_patch."""

    def test_full_patch(self):
        """Test that an offline host without image gets every field."""
        host = make_host()
        host["metadata"]["resourceVersion"] = "7"

        assert image_patch(host, URL) == {
            "spec": {"online": True, "image": {"url": URL, "format": "live-iso"}},
            "metadata": {"resourceVersion": "7"},
        }

    def test_only_changed_fields(self):
        """Test that fields already correct are left out."""
        host = make_host(online=True, image={"url": "http://old", "format": "live-iso"})

        assert image_patch(host, URL) == {"spec": {"image": {"url": URL}}}

    def test_already_matching(self):
        host = make_host(online=True, image={"url": URL, "format": "live-iso", "checksum": "abc"})

        assert image_patch(host, URL) is None


class TestClearImagePatch:
    """Test cases for clear_image_patch."""

    def test_removes_image(self):
        host = make_host(online=True, image={"url": URL, "format": "live-iso"})

        assert clear_image_patch(host) == {"spec": {"image": None}}

    def test_no_image(self):
        assert clear_image_patch(make_host()) is None

    def test_empty_image(self):
        """Test that an empty image counts as already cleared."""
        assert clear_image_patch(make_host(image={})) is None


class TestHostImageSynchronizer:
    """Test cases for HostImageSynchronizer against the fake store."""

    def test_set_image(self, store):
        """Test that the host is updated and unrelated fields survive."""
        store.add_host(make_host())
        hosts = HostImageSynchronizer(store)

        assert hosts.set_image(HOST, URL) is True

        spec = store.hosts[HOST]["spec"]
        assert spec["online"] is True
        assert spec["image"] == {"url": URL, "format": "live-iso"}
        assert spec["bootMACAddress"] == "00:11:22:33:44:55"

    def test_set_image_idempotent(self, store):
        store.add_host(make_host())
        hosts = HostImageSynchronizer(store)
        hosts.set_image(HOST, URL)

        assert hosts.set_image(HOST, URL) is False
        assert len(store.patches_for("BareMetalHost")) == 1

    def test_set_image_missing_host(self, store):
        with pytest.raises(NotFoundError):
            HostImageSynchronizer(store).set_image(HOST, URL)

    def test_set_image_conflict(self, store):
        """Test that a concurrent change surfaces as a conflict."""
        store.add_host(make_host())
        original_get = store.get_bare_metal_host

        def stale_get(key):
            host = original_get(key)
            # another writer bumps the version after our read
            store.hosts[key]["metadata"]["resourceVersion"] = "999"
            return host

        store.get_bare_metal_host = stale_get

        with pytest.raises(ConflictError):
            HostImageSynchronizer(store).set_image(HOST, URL)

    def test_clear_image_keeps_online(self, store):
        store.add_host(make_host(online=True, image={"url": URL, "format": "live-iso"}))

        assert HostImageSynchronizer(store).clear_image(HOST) is True

        spec = store.hosts[HOST]["spec"]
        assert "image" not in spec
        assert spec["online"] is True

    def test_clear_image_without_image(self, store):
        store.add_host(make_host())

        assert HostImageSynchronizer(store).clear_image(HOST) is False
        assert store.patches_for("BareMetalHost") == []
