from cookbook.core.exceptions import (
    ServiceError, Unauthenticated, Forbidden, NotFound, InvalidArgument, TransientError, Conflict,
    UnsupportedBackend,
)
from cookbook.core.security import verify_password, get_password_hash
from cookbook.core.logging import setup_logging, get_logger

__all__ = [
    "ServiceError", "Unauthenticated", "Forbidden", "NotFound", "InvalidArgument",
    "TransientError", "Conflict", "UnsupportedBackend", "verify_password", "get_password_hash",
    "setup_logging", "get_logger",
]
