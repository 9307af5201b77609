"""
Service error taxonomy.

Every failure the API reports to a caller is one of these. Each carries a
stable `kind` string (used in structured error payloads) and the HTTP status
used when the error surfaces outside a batch.
"""

from __future__ import annotations

from typing import Any


class ServiceError(RuntimeError):
    kind = "internal"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(ServiceError):
    kind = "validation_error"
    http_status = 422


class NotFound(ServiceError):
    kind = "not_found"
    http_status = 404


class ConflictError(ServiceError):
    kind = "conflict"
    http_status = 409


class UpstreamError(ServiceError):
    """
    The generation service failed, replied with a non-success status, or sent
    a body we could not parse. `status` is None when no response arrived.
    """

    kind = "upstream_error"
    http_status = 502

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status
        return data


class ConfigurationError(ServiceError):
    kind = "configuration_error"
    http_status = 500


class ResourceExhausted(ServiceError):
    kind = "resource_exhausted"
    http_status = 503


class RoutingError(ServiceError):
    kind = "routing_error"
    http_status = 400
