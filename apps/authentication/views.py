"""
Views for authentication module.
Session based login for the JSON API.
"""

from django.contrib.auth import login as auth_login, logout as auth_logout
from django.http import JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_http_methods

from apps.core.exceptions import ValidationError
from apps.core.models import Role, User
from apps.core.utils import form_errors, log_audit_action, parse_json_body
from .forms import LoginForm, SignupForm


def user_to_dict(user):
    return {
        'id': user.id,
        'email': user.email,
        'full_name': user.full_name,
        'roles': list(user.roles.values_list('name', flat=True)),
        'is_admin': user.is_site_admin,
    }


def _read_form(request, form_class, /, **kwargs):
    """Bind a form to the JSON body; returns (form, error_response)."""
    try:
        data = parse_json_body(request)
    except ValidationError as exc:
        return None, JsonResponse(exc.to_dict(), status=exc.status_code)

    form = form_class(data, **kwargs)
    if not form.is_valid():
        exc = ValidationError(errors=form_errors(form))
        return None, JsonResponse(exc.to_dict(), status=exc.status_code)
    return form, None


@require_http_methods(["POST"])
def signup_view(request):
    """Create a learner account and log it in."""
    form, error = _read_form(request, SignupForm)
    if error:
        return error

    data = form.cleaned_data
    user = User.objects.create_user(data['email'], data['password'], full_name=data['full_name'])
    learner_role, _ = Role.objects.get_or_create(name=Role.LEARNER)
    user.roles.add(learner_role)

    auth_login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    log_audit_action(
        request=request,
        action_type='signup',
        log_message=f"User signed up: {user.email}",
        user=user
    )
    return JsonResponse(user_to_dict(user), status=201)


@require_http_methods(["POST"])
def login_view(request):
    form, error = _read_form(request, LoginForm, request=request)
    if error:
        return error

    user = form.get_user()
    auth_login(request, user)

    log_audit_action(
        request=request,
        action_type='login',
        log_message=f"User logged in: {user.email}",
        user=user
    )
    return JsonResponse(user_to_dict(user))


@require_http_methods(["POST"])
def logout_view(request):
    """Logout view."""
    if request.user.is_authenticated:
        # Audit log before logout
        log_audit_action(
            request=request,
            action_type='logout',
            log_message=f"User logged out: {request.user.email}"
        )
    auth_logout(request)
    return JsonResponse({'logged_out': True})


@ensure_csrf_cookie
@require_http_methods(["GET"])
def me_view(request):
    """Current user. Also sets the CSRF cookie for the client."""
    if not request.user.is_authenticated:
        return JsonResponse({'error': 'Authentication required.', 'code': 'not_authenticated'}, status=401)
    return JsonResponse(user_to_dict(request.user))
