"""
Access mixins for the JSON API.

Every admin endpoint goes through AdminRequiredMixin so the role check
lives in one place.
"""

from django.contrib.auth.mixins import AccessMixin, UserPassesTestMixin
from django.http import JsonResponse

from .models import Role


class ApiAccessMixin(AccessMixin):
    """Answer with JSON 401/403 instead of redirecting to a login page."""

    def handle_no_permission(self):
        if not self.request.user.is_authenticated:
            return JsonResponse(
                {'error': 'Authentication required.', 'code': 'not_authenticated'},
                status=401
            )
        return JsonResponse(
            {'error': self.get_permission_denied_message() or 'Access denied.', 'code': 'forbidden'},
            status=403
        )


class ApiLoginRequiredMixin(ApiAccessMixin):
    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        return super().dispatch(request, *args, **kwargs)


class RoleRequiredMixin(ApiAccessMixin, UserPassesTestMixin):
    """Allow superusers and users holding `required_role`."""
    required_role = None

    def test_func(self):
        user = self.request.user
        if not user.is_authenticated:
            return False
        return user.is_superuser or user.has_role(self.required_role)


class AdminRequiredMixin(RoleRequiredMixin):
    required_role = Role.ADMIN
    permission_denied_message = 'Access denied. Admin privileges required.'
