from rest_framework import permissions


class IsAdminRole(permissions.BasePermission):
    """
    Only store administrators (staff, superuser or ``role == 'admin'``).
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin)


class IsBackOfficeRole(permissions.BasePermission):
    """
    Admin, accounting and logistics staff.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_back_office)


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Public reads; writes only for store administrators.
    """
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_admin)
