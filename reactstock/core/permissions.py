from rest_framework.permissions import BasePermission


def is_admin_user(user):
    """Admins are users with the admin role, staff or superusers"""
    if not user or not user.is_authenticated:
        return False
    return user.is_admin


class IsAdminRole(BasePermission):
    message = 'Admin access required'

    def has_permission(self, request, view):
        return is_admin_user(request.user)
