from typing import Optional
from cookbook.core.exceptions import Forbidden
from cookbook.schemas.user import Identity


def require_owner(
    identity: Identity,
    owner_id: int,
    resource: str = "resource",
    resource_id: Optional[int] = None,
) -> None:
    """Allow the resource owner or an administrator; raise Forbidden otherwise."""
    if identity.is_admin:
        return
    if identity.user_id != owner_id:
        raise Forbidden(
            f"User {identity.user_id} does not own this {resource}",
            resource=resource,
            resource_id=resource_id,
        )
