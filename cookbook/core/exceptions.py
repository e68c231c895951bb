"""Failure taxonomy exposed by the service layer.

Every failure a caller can observe is one of these. Storage driver errors are
translated into ``Conflict`` or ``TransientError`` before they leave
``cookbook.database.transaction``; their details are logged, not carried.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for service failures."""

    code = "service_error"

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        resource_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.resource_id = resource_id

    def to_dict(self) -> dict:
        data = {"code": self.code, "detail": self.message}
        if self.resource is not None:
            data["resource"] = self.resource
        if self.resource_id is not None:
            data["resource_id"] = self.resource_id
        return data


class Unauthenticated(ServiceError):
    """Credentials missing, unknown, deleted or not matching."""

    code = "unauthenticated"


class Forbidden(ServiceError):
    """Authenticated but not allowed to act on the target resource."""

    code = "forbidden"


class NotFound(ServiceError):
    """Referenced entity is absent or soft-deleted."""

    code = "not_found"


class InvalidArgument(ServiceError):
    """Input rejected before any write (bad rating, self-follow, ...)."""

    code = "invalid_argument"


class TransientError(ServiceError):
    """Storage contention or timeout. Safe to retry, except the follow toggle."""

    code = "transient"


class Conflict(TransientError):
    """A uniqueness or integrity constraint rejected the write."""

    code = "conflict"


class UnsupportedBackend(ServiceError):
    """The configured database dialect lacks a statement the services need."""

    code = "unsupported_backend"
