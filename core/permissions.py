from rest_framework.permissions import BasePermission

from core.choices import Role


class HasRole(BasePermission):
    message = "Insufficient permissions"
    roles = ()

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in self.roles)


def role_required(*roles):
    """Build a permission class that admits only the given roles."""
    return type(f"{'Or'.join(r.title() for r in roles)}Only", (HasRole,), {"roles": tuple(roles)})


IsManager = role_required(Role.MANAGER)
IsEmployee = role_required(Role.EMPLOYEE)
IsStaff = role_required(Role.MANAGER, Role.EMPLOYEE)
