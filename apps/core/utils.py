"""
Utility functions for the course marketplace.
Helper functions used across multiple modules.
"""

import json
import logging

from .exceptions import ValidationError
from .models import AuditLog

logger = logging.getLogger(__name__)


def log_audit_action(request, action_type, log_message, target_type=None,
                     target_id=None, user=None):
    """
    Create an audit log entry.

    Args:
        request: HTTP request object (used to get user and IP), may be None
        action_type: Type of action (e.g., 'create', 'approve', 'reject')
        log_message: Description of the action
        target_type: Type of object affected (e.g., 'purchase', 'promo_code')
        target_id: ID of the affected object
        user: User object (optional, will use request.user if not provided)

    Returns:
        AuditLog object or None if creation failed
    """
    try:
        if user is None and request is not None and request.user.is_authenticated:
            user = request.user

        ip_address = get_client_ip(request) if request is not None else None
        target_id_str = str(target_id) if target_id is not None else None

        return AuditLog.objects.create(
            user=user,
            action_type=action_type,
            target_type=target_type,
            target_id=target_id_str,
            log_message=log_message,
            ip_address=ip_address
        )

    except Exception as e:
        # Log error but don't fail the request
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def get_client_ip(request):
    """
    Get the client's IP address from the request.

    Args:
        request: HTTP request object

    Returns:
        String IP address or None
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def parse_json_body(request):
    """Decode a JSON object request body. An empty body is an empty dict."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON.")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def form_errors(form):
    """Flatten Django form errors into {field: [messages]}."""
    return {field: [str(msg) for msg in messages] for field, messages in form.errors.items()}


def round_half_up_div(numerator, denominator):
    """Integer division rounding halves away from zero, for non-negative operands."""
    return (2 * numerator + denominator) // (2 * denominator)
