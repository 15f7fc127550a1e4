"""Kubernetes cluster store."""

from .base import ClusterStore
from .client import KubernetesClusterStore

__all__ = ["ClusterStore", "KubernetesClusterStore"]
