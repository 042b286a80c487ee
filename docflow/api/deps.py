"""API dependencies for dependency injection."""

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.core.permissions import Permission, PermissionChecker
from docflow.core.security import verify_access_token
from docflow.db.postgres import get_db
from docflow.models.sql.user import User
from docflow.services.generation import GenerationService

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get the current authenticated user."""
    try:
        payload = verify_access_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except (ValueError, KeyError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


class RequirePermission:
    """Dependency that lets the request through only if the user's role grants a permission."""

    def __init__(self, permission: Permission):
        self.checker = PermissionChecker(permission)

    async def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        self.checker(current_user.role)
        return current_user


# Common permission dependencies
require_admin = RequirePermission(Permission.USER_MANAGE)
require_template_manager = RequirePermission(Permission.TEMPLATE_MANAGE)


def get_generation_service(request: Request) -> GenerationService:
    """The service built at startup from the resolved generation config."""
    return request.app.state.generation_service
