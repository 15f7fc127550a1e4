"""Typed views over the raw resource bodies handled by the operator."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from .constants import FINALIZER

# Fields of ClusterConfig.spec that belong to the embedded ClusterRelocation spec
RELOCATION_SPEC_FIELDS = (
    "apiCertRef",
    "catalogSources",
    "domain",
    "imageDigestMirrors",
    "ingressCertRef",
    "pullSecretRef",
    "registryCert",
    "sshKeys",
)


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Namespace and name identifying a namespaced object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ClusterConfig:
    """A ClusterConfig resource as read from the cluster store."""

    body: dict[str, Any]

    @property
    def metadata(self) -> dict[str, Any]:
        return self.body.get("metadata") or {}

    @property
    def spec(self) -> dict[str, Any]:
        return self.body.get("spec") or {}

    @property
    def status(self) -> dict[str, Any]:
        return self.body.get("status") or {}

    @property
    def key(self) -> ObjectKey:
        return object_key(self.body)

    @property
    def resource_version(self) -> str | None:
        return self.metadata.get("resourceVersion")

    @property
    def generation(self) -> int:
        return self.metadata.get("generation", 0)

    @property
    def annotations(self) -> dict[str, str]:
        return dict(self.metadata.get("annotations") or {})

    @property
    def finalizers(self) -> list[str]:
        return list(self.metadata.get("finalizers") or [])

    @property
    def has_finalizer(self) -> bool:
        return FINALIZER in self.finalizers

    @property
    def is_terminating(self) -> bool:
        return bool(self.metadata.get("deletionTimestamp"))

    @property
    def conditions(self) -> list[dict[str, Any]]:
        return list(self.status.get("conditions") or [])

    def secret_ref(self, field: str) -> ObjectKey | None:
        """Resolve a top-level SecretReference field of ``spec``.

        A reference without a namespace points into the ClusterConfig's own namespace.
        """
        return _secret_key(self.spec.get(field), self.key.namespace)

    @property
    def acm_secret_ref(self) -> ObjectKey | None:
        registration = self.spec.get("acmRegistration") or {}
        return _secret_key(registration.get("acmSecret"), self.key.namespace)

    @property
    def bare_metal_host_ref(self) -> ObjectKey | None:
        ref = self.spec.get("bareMetalHostRef")
        if not ref or not ref.get("name"):
            return None
        return ObjectKey(ref.get("namespace") or self.key.namespace, ref["name"])

    @property
    def relocation_spec(self) -> dict[str, Any]:
        """The ClusterRelocation spec embedded in this ClusterConfig."""
        return {
            field: copy.deepcopy(self.spec[field])
            for field in RELOCATION_SPEC_FIELDS
            if field in self.spec
        }


def _secret_key(ref: dict[str, Any] | None, default_namespace: str) -> ObjectKey | None:
    if not ref or not ref.get("name"):
        return None
    return ObjectKey(ref.get("namespace") or default_namespace, ref["name"])


def object_key(body: dict[str, Any]) -> ObjectKey:
    """Key of any raw resource body."""
    metadata = body.get("metadata") or {}
    return ObjectKey(metadata.get("namespace", ""), metadata.get("name", ""))
