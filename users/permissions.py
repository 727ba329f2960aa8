from rest_framework import permissions


def _role(request):
    return getattr(request.user, 'role', '')


class IsStudent(permissions.BasePermission):
    """Only authenticated users holding a student profile."""
    message = "Only students can perform this action."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return _role(request) == 'STUDENT' and hasattr(request.user, 'student')


class IsAdminRole(permissions.BasePermission):
    """
    Allows Super Admins, Registrars and Django staff.
    """
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_staff or _role(request) in ['SUPER_ADMIN', 'REGISTRAR']


class IsTeacherOrAdmin(permissions.BasePermission):
    """
    Allows Teachers and the admin roles.
    Strictly blocks Students.
    """
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return (
            request.user.is_staff or
            _role(request) in ['TEACHER', 'SUPER_ADMIN', 'REGISTRAR']
        )
