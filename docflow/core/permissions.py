"""Role-based access control (RBAC) for the application."""

from enum import Enum

from fastapi import HTTPException, status


class Role(str, Enum):
    """Account roles."""

    ADMIN = "admin"
    USER = "user"


class Permission(str, Enum):
    """Available permissions in the system."""

    # Document permissions
    DOCUMENT_CREATE = "document:create"
    DOCUMENT_READ_ALL = "document:read_all"
    DOCUMENT_REVIEW = "document:review"

    # Template permissions
    TEMPLATE_READ = "template:read"
    TEMPLATE_MANAGE = "template:manage"

    # User management
    USER_MANAGE = "user:manage"

    # Text generation
    AI_GENERATE = "ai:generate"


# Role-permission mapping
ROLE_PERMISSIONS: dict[Role, set[Permission]] = {
    Role.ADMIN: set(Permission),
    Role.USER: {
        Permission.DOCUMENT_CREATE,
        Permission.TEMPLATE_READ,
        Permission.AI_GENERATE,
    },
}


def has_permission(role: Role, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())


def has_any_permission(role: Role, permissions: list[Permission]) -> bool:
    """Check if a role has any of the specified permissions."""
    role_perms = ROLE_PERMISSIONS.get(role, set())
    return any(perm in role_perms for perm in permissions)


class PermissionChecker:
    """Permission checker dependency for FastAPI."""

    def __init__(self, required_permission: Permission):
        self.required_permission = required_permission

    def __call__(self, role: Role | str) -> bool:
        if isinstance(role, str):
            role = Role(role)
        if not has_permission(role, self.required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role '{role.value}' is not authorized to access this route",
            )
        return True
