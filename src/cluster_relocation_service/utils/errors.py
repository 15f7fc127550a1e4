"""Error types and sanitization utilities to prevent information leakage."""

from __future__ import annotations

import re


class RelocationServiceError(Exception):
    """Base class for errors raised by the Cluster Relocation Service."""


class ConfigurationError(RelocationServiceError):
    """Required startup configuration is missing or invalid."""


class NotFoundError(RelocationServiceError):
    """A referenced object does not exist in the cluster."""

    def __init__(self, kind: str, namespace: str, name: str):
        super().__init__(f"{kind} {namespace}/{name} not found")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class ConflictError(RelocationServiceError):
    """A conditional write lost an optimistic concurrency race."""


class LockAcquisitionError(RelocationServiceError):
    """The export directory lock could not be taken for a reason other than contention."""


class ExportError(RelocationServiceError):
    """Writing an exported artifact failed."""

    def __init__(self, artifact: str, message: str):
        super().__init__(f"failed to write {artifact}: {message}")
        self.artifact = artifact


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"-----BEGIN [A-Z ]+-----[^-]*-----END [A-Z ]+-----",
    r'"\.dockerconfigjson"\s*:\s*"[^"]+"',
    r'"tls\.key"\s*:\s*"[^"]+"',
]

# "field: value" pairs whose value is redacted
SENSITIVE_FIELDS = {
    "password",
    "credentials",
    "token",
    "auth",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE | re.DOTALL)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"\b{field}[:=]\s*([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))
