"""
Request-level dependencies: caller role and capability checks
"""
from typing import Callable, Optional

from fastapi import Header

from core.config.settings import settings
from core.errors import PermissionDeniedError


def get_current_role(x_user_role: Optional[str] = Header(None)) -> str:
    """Role named by the X-User-Role header, or the configured default."""
    return (x_user_role or settings.default_role).strip().lower()


def has_capability(role: str, capability: str) -> bool:
    return capability in settings.role_capabilities.get(role, [])


def require_capability(capability: str) -> Callable[..., str]:
    """Dependency factory: allows the request only for roles holding ``capability``."""

    def checker(x_user_role: Optional[str] = Header(None)) -> str:
        role = get_current_role(x_user_role)
        if not has_capability(role, capability):
            raise PermissionDeniedError(
                f"Role '{role}' is not allowed to {capability.replace('_', ' ')}",
                {"role": role, "capability": capability},
            )
        return role

    return checker
