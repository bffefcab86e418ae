# accounts/permissions.py

from rest_framework.permissions import BasePermission


def has_role(user, *roles):
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return getattr(user, 'role', None) in roles


class IsAdminRole(BasePermission):
    message = 'Access denied. Admin role required.'

    def has_permission(self, request, view):
        return has_role(request.user, 'admin')


class IsAdminOrStorekeeper(BasePermission):
    message = 'Access denied. Admin or storekeeper role required.'

    def has_permission(self, request, view):
        return has_role(request.user, 'admin', 'storekeeper')


def can_see_purchase_prices(user):
    return has_role(user, 'admin')


def is_restricted_technician(user):
    """Technicians only work on job cards assigned to them."""
    return bool(user and user.is_authenticated and not user.is_superuser
                and getattr(user, 'role', None) == 'technician')
