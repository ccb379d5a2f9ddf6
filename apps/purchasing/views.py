"""
Views for the learner side of the purchase flow.
"""

import logging

from apps.core.api import JsonApiView
from apps.core.config import get_site_config
from apps.core.exceptions import ValidationError
from apps.core.permissions import ApiLoginRequiredMixin
from apps.core.utils import form_errors, log_audit_action

from .forms import PromoValidateForm, PurchaseForm
from .services import (
    build_purchase_intent, get_purchasable_course, purchase_status,
    record_purchase, validate_promo_code,
)

logger = logging.getLogger(__name__)


class PromoValidateView(ApiLoginRequiredMixin, JsonApiView):
    """Check a promo code and price the course with it."""
    http_method_names = ['post']

    def post(self, request):
        form = PromoValidateForm(self.get_json())
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))

        course = get_purchasable_course(form.cleaned_data['course_id'])
        promo = validate_promo_code(form.cleaned_data['code'])
        intent = build_purchase_intent(course.price, promo.discount_percent)

        return {
            'promo_code_id': promo.id,
            'code': promo.code,
            'discount_percent': promo.discount_percent,
            'discount': intent.discount,
            'final_amount': intent.final_amount,
            'is_free': intent.is_free,
        }


class PurchaseIntentView(ApiLoginRequiredMixin, JsonApiView):
    """
    Transfer instruction for a course: price after discount, memo code and
    the bank account to pay into.
    """
    http_method_names = ['get', 'post']

    def get(self, request, course_id):
        return self.build(course_id, request.GET.get('code', ''))

    def post(self, request, course_id):
        return self.build(course_id, self.get_json().get('code', ''))

    def build(self, course_id, code):
        course = get_purchasable_course(course_id)
        promo = validate_promo_code(code) if code else None
        intent = build_purchase_intent(course.price, promo.discount_percent if promo else 0)

        data = intent.to_dict()
        data.update({
            'course_id': course.id,
            'course_title': course.title,
            'promo_code_id': promo.id if promo else None,
            'purchase_status': purchase_status(self.request.user, course),
            'bank': get_site_config().bank_details(),
        })
        return data


class PurchaseCreateView(ApiLoginRequiredMixin, JsonApiView):
    """Submit a purchase. Free purchases unlock the course right away."""
    http_method_names = ['post']
    status_code = 201

    def post(self, request):
        form = PurchaseForm(self.get_json())
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))

        data = form.cleaned_data
        course = get_purchasable_course(data['course_id'])
        purchase = record_purchase(
            request.user,
            course,
            promo_code_id=data.get('promo_code_id'),
            transfer_code=data.get('transfer_code') or '',
            payment_reference=data.get('payment_reference') or '',
            expected_amount=data.get('amount'),
        )

        log_audit_action(
            request, 'create',
            f"Submitted {purchase.payment_method} purchase of '{course.title}' ({purchase.amount})",
            target_type='purchase', target_id=purchase.id
        )

        if purchase.is_completed:
            message = "You now have access to this course."
        else:
            message = "Payment submitted. Your access will be granted once the transfer is confirmed."

        result = purchase.to_dict()
        result['message'] = message
        return result
