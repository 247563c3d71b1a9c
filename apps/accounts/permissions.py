"""
Custom permission classes for the accounts app.
"""
from rest_framework.permissions import BasePermission


class IsBookkeepingAdmin(BasePermission):
    """
    Allow only ADMIN-type users (or Django staff).

    Usage:
        def get_permissions(self):
            if self.action in ['create', 'destroy']:
                return [IsAuthenticated(), IsBookkeepingAdmin()]
            return super().get_permissions()
    """

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_admin or user.is_staff))


class IsAdminOrSelf(BasePermission):
    """
    Allow admins to act on any user and everyone else only on themselves.
    """

    message = 'You can only manage your own account.'

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.is_admin or user.is_staff:
            return True
        return obj.pk == user.pk
