from fastapi import Depends, Header, HTTPException

from jobboard.services.throttle_service import list_throttle
from jobboard.utils.security import Principal, Role


async def require_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_tenant_id: str | None = Header(default=None),
    x_user_name: str | None = Header(default=None),
) -> Principal:
    # Identity is issued upstream; these headers carry its result.
    if not x_user_id or not x_tenant_id:
        raise HTTPException(status_code=401, detail="Missing identity headers")
    return Principal(
        user_id=x_user_id,
        role=Role.parse(x_user_role),
        tenant_id=x_tenant_id,
        display_name=x_user_name,
    )


async def throttle_listing(principal: Principal = Depends(require_principal)) -> Principal:
    list_throttle.check(principal.user_id)
    return principal
