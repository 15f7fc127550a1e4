"""Environment-based configuration for the Cluster Relocation Service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
from urllib.parse import quote, urlunsplit

from .constants import LOCK_RETRY_DELAY_SECONDS
from .utils.errors import ConfigurationError

_REQUIRED = ("SERVICE_NAME", "SERVICE_NAMESPACE", "SERVICE_SCHEME")


@dataclass(frozen=True)
class ReconcilerOptions:
    """Settings read once at operator startup."""

    service_name: str
    service_namespace: str
    service_scheme: str
    service_port: str = ""
    data_dir: Path = Path("/data")
    metrics_port: int = 8080
    lock_retry_delay: float = LOCK_RETRY_DELAY_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ReconcilerOptions:
        """Load options from environment variables.

        Raises:
            ConfigurationError: If a required variable is unset or a value is malformed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in _REQUIRED if not env.get(name)]
        if missing:
            raise ConfigurationError(f"{', '.join(missing)} must be set")

        try:
            options = cls(
                service_name=env["SERVICE_NAME"],
                service_namespace=env["SERVICE_NAMESPACE"],
                service_scheme=env["SERVICE_SCHEME"],
                service_port=env.get("SERVICE_PORT", ""),
                data_dir=Path(env.get("DATA_DIR", "/data")),
                metrics_port=int(env.get("METRICS_PORT", "8080")),
                lock_retry_delay=float(env.get("LOCK_RETRY_DELAY_SECONDS", str(LOCK_RETRY_DELAY_SECONDS))),
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid configuration value: {e}") from e

        if options.service_port and not options.service_port.isdigit():
            raise ConfigurationError(f"SERVICE_PORT must be numeric, got {options.service_port!r}")
        return options

    @property
    def base_url(self) -> str:
        """Image server base URL, e.g. ``http://svc.svc-ns:8000``."""
        return service_url(self.service_name, self.service_namespace, self.service_scheme, self.service_port)


def service_url(name: str, namespace: str, scheme: str, port: str = "") -> str:
    """Build the in-cluster URL of a service."""
    host = f"{name}.{namespace}"
    if port:
        host = f"{host}:{port}"
    return urlunsplit((scheme, host, "", "", ""))


def image_url(base_url: str, namespace: str, name: str) -> str:
    """Build the URL the image server uses for a ClusterConfig's ISO."""
    return "/".join([base_url.rstrip("/"), "images", quote(namespace, safe=""), quote(f"{name}.iso", safe="")])
