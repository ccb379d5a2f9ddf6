"""
Error taxonomy shared by all service modules.

Services raise these; apps.core.api.JsonApiView turns them into JSON
responses with the matching HTTP status.
"""


class ServiceError(Exception):
    status_code = 400
    code = 'error'
    default_message = 'The request could not be completed.'
    retryable = False

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.retryable:
            payload['retryable'] = True
        payload.update(self.extra)
        return payload


class ValidationError(ServiceError):
    """Malformed input. The client should fix the request and re-prompt."""
    status_code = 400
    code = 'validation_error'
    default_message = 'Invalid input.'


class NotFound(ServiceError):
    status_code = 404
    code = 'not_found'
    default_message = 'Not found.'


class CourseNotFound(NotFound):
    code = 'course_not_found'
    default_message = 'Course not found.'


class PromoCodeNotFound(NotFound):
    code = 'promo_code_not_found'
    default_message = 'Promo code is not valid.'


class PurchaseNotFound(NotFound):
    code = 'purchase_not_found'
    default_message = 'Purchase not found.'


class Conflict(ServiceError):
    """The request clashes with current state; inform the user, do not retry."""
    status_code = 409
    code = 'conflict'
    default_message = 'The request conflicts with the current state.'


class AlreadySubmitted(Conflict):
    code = 'already_submitted'
    default_message = 'You have already submitted a payment for this course.'


class PromoCodeLimitExceeded(Conflict):
    code = 'promo_code_limit_exceeded'
    default_message = 'This promo code has reached its usage limit.'


class CertificateAlreadyIssued(Conflict):
    code = 'certificate_already_issued'
    default_message = 'A certificate has already been issued for this course.'


class AuthorizationError(ServiceError):
    status_code = 403
    code = 'forbidden'
    default_message = 'You do not have permission to perform this action.'


class TransientError(ServiceError):
    """Storage or rendering failure. Safe to retry."""
    status_code = 503
    code = 'temporarily_unavailable'
    default_message = 'Something went wrong. Please try again.'
    retryable = True


class CertificateRenderError(TransientError):
    code = 'certificate_render_failed'
    default_message = 'The certificate could not be generated. Please try again.'
