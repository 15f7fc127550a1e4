"""Shared fixtures for the unit tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import kopf
import pytest

from cluster_relocation_service.config import ReconcilerOptions
from cluster_relocation_service.handlers.cluster_config import ClusterConfigHandler
from fakes import InMemoryClusterStore


@pytest.fixture(autouse=True)
def events(monkeypatch: pytest.MonkeyPatch) -> Mock:
    """Capture Kubernetes events instead of posting them."""
    mock_event = Mock()
    monkeypatch.setattr(kopf, "event", mock_event)
    return mock_event


@pytest.fixture
def store() -> InMemoryClusterStore:
    return InMemoryClusterStore()


@pytest.fixture
def options(tmp_path: Path) -> ReconcilerOptions:
    return ReconcilerOptions(
        service_name="svc",
        service_namespace="svc-ns",
        service_scheme="http",
        service_port="8000",
        data_dir=tmp_path,
    )


@pytest.fixture
def handler(options: ReconcilerOptions, store: InMemoryClusterStore) -> ClusterConfigHandler:
    cluster_config_handler = ClusterConfigHandler()
    cluster_config_handler.configure(options, store)
    return cluster_config_handler
