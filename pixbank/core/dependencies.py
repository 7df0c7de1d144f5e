from fastapi import Depends, HTTPException, Request, status

from pixbank.core.constants import UserRole
from pixbank.core.exceptions import PermissionDenied
from pixbank.models.user import User
from pixbank.services.activity import RequestMeta


def client_ip(request: Request) -> str | None:
    """Best-effort client address, honouring proxy headers first."""
    ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not ip:
        ip = request.headers.get("X-Real-IP", "")
    if not ip and request.client:
        ip = request.client.host
    return ip or None


async def get_current_user(request: Request) -> User:
    """
    Get current authenticated user from request state.

    UserInjectionMiddleware has already parsed the JWT and loaded the user.
    The loaded row is detached, so workflows must re-read the balance
    themselves and only rely on its id and role.

    Raises:
        HTTPException: 401 if user is not authenticated
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_role(role: UserRole):
    """
    Build a dependency that admits only users holding `role`.

    This is the single capability check for role-gated entry points; routers
    attach it instead of comparing roles inline.
    """

    async def _check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role.value:
            raise PermissionDenied()
        return current_user

    return _check_role


require_admin = require_role(UserRole.ADMIN)


async def get_request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        ip_address=client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
