"""
Role based permission classes.

The classes gate whole views; :func:`require_role` is for views that
serve several methods with different audiences.
"""
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


def require_role(request, *roles: str) -> None:
    if _role(request) not in roles:
        raise PermissionDenied("Insufficient permissions")


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    message = "Administrator role required"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "admin"

