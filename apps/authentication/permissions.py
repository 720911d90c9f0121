from rest_framework import permissions


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) == "admin")


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return is_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)
