"""
Purchase flow: promo validation, pricing, purchase recording and approval.
"""

import logging
import random
from dataclasses import dataclass, asdict

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.core.exceptions import (
    AlreadySubmitted, Conflict, CourseNotFound, PromoCodeLimitExceeded,
    PromoCodeNotFound, PurchaseNotFound, ValidationError,
)
from apps.core.utils import round_half_up_div
from apps.learning.models import Course

from .models import PromoCode, Purchase

logger = logging.getLogger(__name__)


# --- Promo Code Validator ---

def normalise_code(raw_code):
    return raw_code.strip().upper() if isinstance(raw_code, str) else ''


def validate_promo_code(raw_code):
    """
    Look up a redeemable promo code.

    Does not touch used_count; that happens only once a purchase is recorded.

    Raises:
        ValidationError: empty code
        PromoCodeLimitExceeded: usage limit reached (reported even for inactive codes)
        PromoCodeNotFound: unknown, inactive or expired code
    """
    code = normalise_code(raw_code)
    if not code:
        raise ValidationError("Please enter a promo code.")

    promo = PromoCode.objects.filter(code=code).first()
    if promo is None:
        raise PromoCodeNotFound()
    if promo.is_exhausted:
        raise PromoCodeLimitExceeded()
    if not promo.is_active or (promo.expires_at and promo.expires_at <= timezone.now()):
        raise PromoCodeNotFound()
    return promo


# --- Purchase Intent Builder ---

@dataclass(frozen=True)
class PurchaseIntent:
    price: int
    discount_percent: int
    discount: int
    final_amount: int
    transfer_code: str

    @property
    def is_free(self):
        return self.final_amount == 0

    def to_dict(self):
        data = asdict(self)
        data['is_free'] = self.is_free
        return data


def compute_discount(price, discount_percent):
    """Rounded discount in whole currency units."""
    return round_half_up_div(price * discount_percent, 100)


def generate_transfer_code():
    """Random digits for the bank memo. Collisions are acceptable."""
    digits = getattr(settings, 'TRANSFER_CODE_DIGITS', 4)
    return str(random.randint(10 ** (digits - 1), 10 ** digits - 1))


def build_purchase_intent(price, discount_percent=0, transfer_code=None):
    if price < 0:
        raise ValidationError("Price cannot be negative.")
    if not 0 <= discount_percent <= 100:
        raise ValidationError("Discount must be between 0 and 100 percent.")

    discount = compute_discount(price, discount_percent)
    return PurchaseIntent(
        price=price,
        discount_percent=discount_percent,
        discount=discount,
        final_amount=price - discount,
        transfer_code=transfer_code or generate_transfer_code(),
    )


# --- Purchase Record Manager ---

def get_purchasable_course(course_id):
    course = Course.objects.filter(pk=course_id, is_published=True).first()
    if course is None:
        raise CourseNotFound()
    return course


def _redeem_promo_code(promo):
    """Best-effort usage counter bump, run after the purchase is durable."""
    try:
        PromoCode.objects.filter(pk=promo.pk).update(used_count=F('used_count') + 1)
    except DatabaseError as e:
        logger.error(f"Failed to increment usage of promo code {promo.code}: {str(e)}")


def record_purchase(user, course, promo_code_id=None, transfer_code='',
                    payment_reference='', expected_amount=None):
    """
    Record a purchase. Free purchases are completed immediately, paid ones
    wait for admin approval.

    Args:
        user: Purchasing user
        course: Published Course
        promo_code_id: Promo code chosen at checkout; re-validated here
        transfer_code: Memo code shown in the transfer instruction
        payment_reference: Transaction id or note typed by the payer
        expected_amount: Amount the client displayed; must match the server price

    Returns:
        The created Purchase

    Raises:
        AlreadySubmitted: the user already has a purchase for this course
    """
    if not course.is_published:
        raise CourseNotFound()

    promo = None
    discount_percent = 0
    if promo_code_id:
        promo = PromoCode.objects.filter(pk=promo_code_id).first()
        if promo is None:
            raise PromoCodeNotFound()
        promo = validate_promo_code(promo.code)
        discount_percent = promo.discount_percent

    intent = build_purchase_intent(course.price, discount_percent, transfer_code=transfer_code)
    if expected_amount is not None and expected_amount != intent.final_amount:
        raise ValidationError(
            "The price of this course has changed. Please review the new amount.",
            amount=intent.final_amount
        )

    payment_reference = (payment_reference or '').strip()
    if intent.is_free:
        status = Purchase.STATUS_COMPLETED
        method = Purchase.METHOD_PROMO_CODE
        payment_id = payment_reference or (f"PROMO-{promo.code}" if promo else 'FREE')
    else:
        if not payment_reference:
            raise ValidationError("Please enter the transaction id of your bank transfer.")
        status = Purchase.STATUS_PENDING
        method = Purchase.METHOD_BANK_TRANSFER
        payment_id = payment_reference

    try:
        with transaction.atomic():
            purchase = Purchase.objects.create(
                user=user,
                course=course,
                amount=intent.final_amount,
                payment_method=method,
                payment_id=payment_id[:255],
                transfer_code=intent.transfer_code,
                status=status,
                promo_code=promo,
                approved_at=timezone.now() if intent.is_free else None,
            )
    except IntegrityError:
        if Purchase.objects.filter(user=user, course=course).exists():
            raise AlreadySubmitted()
        raise

    logger.info(f"Purchase {purchase.id} recorded: user={user.id} course={course.id} "
                f"amount={purchase.amount} status={purchase.status}")

    if promo is not None:
        _redeem_promo_code(promo)

    return purchase


def purchase_status(user, course):
    """'none', 'pending' or 'completed' for the user's purchase of course."""
    if not user.is_authenticated:
        return 'none'
    status = Purchase.objects.filter(user=user, course=course).values_list('status', flat=True).first()
    return status or 'none'


# --- Admin Approval Workflow ---

def approve_purchase(purchase_id, actor=None):
    """
    Mark a pending purchase completed. Approving a completed purchase is a no-op.

    Raises:
        PurchaseNotFound: no such purchase
    """
    updated = Purchase.objects.filter(pk=purchase_id, status=Purchase.STATUS_PENDING).update(
        status=Purchase.STATUS_COMPLETED,
        approved_at=timezone.now(),
        approved_by=actor,
    )
    purchase = Purchase.objects.select_related('user', 'course').filter(pk=purchase_id).first()
    if purchase is None:
        raise PurchaseNotFound()

    if updated:
        logger.info(f"Purchase {purchase.id} approved by {actor.email if actor else 'system'}")
    return purchase, bool(updated)


def reject_purchase(purchase_id, actor=None):
    """
    Delete a pending purchase so the learner can resubmit.

    Raises:
        PurchaseNotFound: no such purchase
        Conflict: the purchase is already completed
    """
    with transaction.atomic():
        purchase = Purchase.objects.select_for_update().select_related('user', 'course') \
            .filter(pk=purchase_id).first()
        if purchase is None:
            raise PurchaseNotFound()
        if purchase.is_completed:
            raise Conflict("Completed purchases cannot be rejected.")
        purchase.delete()

    logger.info(f"Purchase {purchase_id} rejected by {actor.email if actor else 'system'}")
    return purchase
