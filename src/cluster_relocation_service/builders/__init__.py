"""Builders turning cluster resources into exported documents."""

from .artifacts import (
    API_VERSIONS,
    build_cluster_relocation,
    planned_artifacts,
    resolve_api_version,
    serialize,
)

__all__ = [
    "API_VERSIONS",
    "build_cluster_relocation",
    "planned_artifacts",
    "resolve_api_version",
    "serialize",
]
