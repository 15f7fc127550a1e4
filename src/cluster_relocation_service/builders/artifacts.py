"""Builders for the artifacts exported to the image server."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..constants import (
    CLUSTER_RELOCATION_GROUP,
    FILE_ACM_SECRET,
    FILE_API_CERT,
    FILE_INGRESS_CERT,
    FILE_PULL_SECRET,
    KIND_CLUSTER_RELOCATION,
)
from ..models import ClusterConfig, ObjectKey
from ..utils.errors import ExportError

# Serialization versions known for each exported kind, oldest first
API_VERSIONS: dict[str, tuple[str, ...]] = {
    KIND_CLUSTER_RELOCATION: (f"{CLUSTER_RELOCATION_GROUP}/v1beta1",),
}


@dataclass(frozen=True)
class SecretArtifact:
    """A secret to export and the file it is written to."""

    description: str
    file_name: str
    ref: ObjectKey


def resolve_api_version(kind: str) -> str:
    """Return the most recent registered apiVersion for ``kind``.

    Raises:
        ExportError: If the kind has no registered version
    """
    versions = API_VERSIONS.get(kind)
    if not versions:
        raise ExportError(kind, f"unable to find API version for {kind}")
    # the last registered version is the most recent
    return versions[-1]


def build_cluster_relocation(cluster_config: ClusterConfig) -> dict[str, Any]:
    """Build the ClusterRelocation document for a ClusterConfig.

    Args:
        cluster_config: The source ClusterConfig

    Returns:
        A complete ClusterRelocation resource envelope
    """
    key = cluster_config.key
    return {
        "apiVersion": resolve_api_version(KIND_CLUSTER_RELOCATION),
        "kind": KIND_CLUSTER_RELOCATION,
        "metadata": {
            "name": key.name,
            "namespace": key.namespace,
        },
        "spec": cluster_config.relocation_spec,
        "status": {},
    }


def planned_artifacts(cluster_config: ClusterConfig) -> list[SecretArtifact]:
    """List the secret artifacts whose references are set, in write order."""
    candidates = [
        ("api cert secret", FILE_API_CERT, cluster_config.secret_ref("apiCertRef")),
        ("ingress cert secret", FILE_INGRESS_CERT, cluster_config.secret_ref("ingressCertRef")),
        ("pull secret", FILE_PULL_SECRET, cluster_config.secret_ref("pullSecretRef")),
        ("ACM secret", FILE_ACM_SECRET, cluster_config.acm_secret_ref),
    ]
    return [SecretArtifact(desc, file_name, ref) for desc, file_name, ref in candidates if ref is not None]


def serialize(document: dict[str, Any]) -> bytes:
    """Serialize a document deterministically so that rewrites are byte-identical."""
    return json.dumps(document, sort_keys=True, separators=(",", ":")).encode("utf-8")
