"""
Test cases for promo validation, pricing, purchase recording and approval.
"""
from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.core.exceptions import (
    AlreadySubmitted, Conflict, CourseNotFound, PromoCodeLimitExceeded,
    PromoCodeNotFound, PurchaseNotFound, ValidationError,
)
from apps.purchasing.models import PromoCode, Purchase
from apps.purchasing.reports import course_revenue_breakdown, revenue_summary
from apps.purchasing.services import (
    approve_purchase, build_purchase_intent, record_purchase, reject_purchase,
    validate_promo_code,
)

from .factories import make_course, make_promo, make_user


class PromoValidationTest(TestCase):

    def test_code_is_normalised(self):
        promo = make_promo(code='SAVE20')
        self.assertEqual(validate_promo_code('  save20 ').pk, promo.pk)

    def test_empty_code(self):
        with self.assertRaises(ValidationError):
            validate_promo_code('   ')

    def test_unknown_code(self):
        with self.assertRaises(PromoCodeNotFound):
            validate_promo_code('NOPE')

    def test_inactive_code(self):
        make_promo(code='OFF', is_active=False)
        with self.assertRaises(PromoCodeNotFound):
            validate_promo_code('OFF')

    def test_expired_code(self):
        make_promo(code='OLD', expires_at=timezone.now() - timedelta(days=1))
        with self.assertRaises(PromoCodeNotFound):
            validate_promo_code('OLD')

    def test_exhausted_code_reported_even_when_inactive(self):
        make_promo(code='ONCE', usage_limit=1, used_count=1, is_active=False)
        with self.assertRaises(PromoCodeLimitExceeded):
            validate_promo_code('ONCE')

    def test_validation_does_not_consume_usage(self):
        promo = make_promo(code='LIMITED', usage_limit=5)
        validate_promo_code('LIMITED')
        promo.refresh_from_db()
        self.assertEqual(promo.used_count, 0)


class PurchaseIntentTest(TestCase):

    def test_partial_discount(self):
        intent = build_purchase_intent(50000, 20)
        self.assertEqual(intent.discount, 10000)
        self.assertEqual(intent.final_amount, 40000)
        self.assertFalse(intent.is_free)

    def test_full_discount_is_free(self):
        intent = build_purchase_intent(100000, 100)
        self.assertEqual(intent.final_amount, 0)
        self.assertTrue(intent.is_free)

    def test_discount_rounds_half_up(self):
        # 15% of 10 is 1.5
        self.assertEqual(build_purchase_intent(10, 15).discount, 2)
        # 15% of 30 is 4.5
        self.assertEqual(build_purchase_intent(30, 15).discount, 5)
        # 33% of 10 is 3.3
        self.assertEqual(build_purchase_intent(10, 33).discount, 3)

    def test_transfer_code_is_four_digits(self):
        code = build_purchase_intent(1000).transfer_code
        self.assertEqual(len(code), 4)
        self.assertTrue(code.isdigit())

    @override_settings(TRANSFER_CODE_DIGITS=6)
    def test_transfer_code_length_configurable(self):
        self.assertEqual(len(build_purchase_intent(1000).transfer_code), 6)


class RecordPurchaseTest(TestCase):

    def setUp(self):
        self.user = make_user()
        self.course = make_course(price=50000)

    def test_paid_purchase_is_pending(self):
        purchase = record_purchase(self.user, self.course, transfer_code='1234', payment_reference='TX-998')
        self.assertEqual(purchase.status, Purchase.STATUS_PENDING)
        self.assertEqual(purchase.payment_method, Purchase.METHOD_BANK_TRANSFER)
        self.assertEqual(purchase.amount, 50000)
        self.assertEqual(purchase.payment_id, 'TX-998')
        self.assertEqual(purchase.transfer_code, '1234')

    def test_partial_discount_purchase(self):
        promo = make_promo(code='SAVE20', discount_percent=20)
        purchase = record_purchase(self.user, self.course, promo_code_id=promo.id,
                                   payment_reference='TX-1', expected_amount=40000)
        self.assertEqual(purchase.amount, 40000)
        self.assertEqual(purchase.status, Purchase.STATUS_PENDING)
        self.assertEqual(purchase.promo_code, promo)

    def test_free_purchase_completed_immediately(self):
        course = make_course(title='Free with promo', price=100000)
        promo = make_promo(code='FREE100', discount_percent=100)
        purchase = record_purchase(self.user, course, promo_code_id=promo.id)

        self.assertEqual(purchase.status, Purchase.STATUS_COMPLETED)
        self.assertEqual(purchase.payment_method, Purchase.METHOD_PROMO_CODE)
        self.assertEqual(purchase.amount, 0)
        self.assertEqual(purchase.payment_id, 'PROMO-FREE100')

    def test_promo_usage_incremented_once(self):
        promo = make_promo(code='SAVE20', usage_limit=10)
        record_purchase(self.user, self.course, promo_code_id=promo.id, payment_reference='TX-1')
        promo.refresh_from_db()
        self.assertEqual(promo.used_count, 1)

    def test_duplicate_purchase_is_already_submitted(self):
        record_purchase(self.user, self.course, payment_reference='TX-1')
        with self.assertRaises(AlreadySubmitted):
            record_purchase(self.user, self.course, payment_reference='TX-2')
        self.assertEqual(Purchase.objects.filter(user=self.user, course=self.course).count(), 1)

    def test_duplicate_does_not_consume_promo(self):
        promo = make_promo(code='SAVE20')
        record_purchase(self.user, self.course, promo_code_id=promo.id, payment_reference='TX-1')
        with self.assertRaises(AlreadySubmitted):
            record_purchase(self.user, self.course, promo_code_id=promo.id, payment_reference='TX-2')
        promo.refresh_from_db()
        self.assertEqual(promo.used_count, 1)

    def test_exhausted_promo_rejected(self):
        promo = make_promo(code='ONCE', usage_limit=1, used_count=1)
        with self.assertRaises(PromoCodeLimitExceeded):
            record_purchase(self.user, self.course, promo_code_id=promo.id, payment_reference='TX-1')
        self.assertFalse(Purchase.objects.exists())

    def test_amount_mismatch(self):
        with self.assertRaises(ValidationError):
            record_purchase(self.user, self.course, payment_reference='TX-1', expected_amount=100)

    def test_paid_purchase_needs_reference(self):
        with self.assertRaises(ValidationError):
            record_purchase(self.user, self.course, payment_reference='  ')

    def test_unpublished_course(self):
        course = make_course(title='Draft', published=False)
        with self.assertRaises(CourseNotFound):
            record_purchase(self.user, course, payment_reference='TX-1')

    def test_counter_failure_keeps_purchase(self):
        promo = make_promo(code='SAVE20')
        with mock.patch('apps.purchasing.services.PromoCode.objects.filter') as mocked_filter:
            mocked_filter.return_value.first.return_value = promo
            mocked_filter.return_value.update.side_effect = DatabaseError('counter table locked')
            purchase = record_purchase(self.user, self.course, promo_code_id=promo.id,
                                       payment_reference='TX-1')
        self.assertTrue(Purchase.objects.filter(pk=purchase.pk).exists())


class ApprovalWorkflowTest(TestCase):

    def setUp(self):
        self.admin = make_user(email='admin@example.com', admin=True)
        self.user = make_user()
        self.course = make_course(price=50000)
        self.purchase = record_purchase(self.user, self.course, payment_reference='TX-1')

    def test_approve_pending(self):
        purchase, changed = approve_purchase(self.purchase.id, actor=self.admin)
        self.assertTrue(changed)
        self.assertEqual(purchase.status, Purchase.STATUS_COMPLETED)
        self.assertEqual(purchase.approved_by, self.admin)
        self.assertIsNotNone(purchase.approved_at)

    def test_approve_is_idempotent(self):
        approve_purchase(self.purchase.id, actor=self.admin)
        purchase, changed = approve_purchase(self.purchase.id, actor=self.admin)
        self.assertFalse(changed)
        self.assertEqual(purchase.status, Purchase.STATUS_COMPLETED)

    def test_approve_missing(self):
        with self.assertRaises(PurchaseNotFound):
            approve_purchase(99999, actor=self.admin)

    def test_reject_deletes_pending(self):
        reject_purchase(self.purchase.id, actor=self.admin)
        self.assertFalse(Purchase.objects.filter(pk=self.purchase.id).exists())
        # The learner can submit again
        record_purchase(self.user, self.course, payment_reference='TX-2')

    def test_reject_completed_is_conflict(self):
        approve_purchase(self.purchase.id, actor=self.admin)
        with self.assertRaises(Conflict):
            reject_purchase(self.purchase.id, actor=self.admin)

    def test_reject_missing(self):
        with self.assertRaises(PurchaseNotFound):
            reject_purchase(99999, actor=self.admin)


class RevenueReportTest(TestCase):

    def setUp(self):
        self.python = make_course(title='Python', price=50000)
        self.ai = make_course(title='AI', price=80000)
        self.empty = make_course(title='Unsold', price=10000)

        for i in range(3):
            user = make_user(email=f"buyer{i}@example.com")
            record_purchase(user, self.python, payment_reference=f"TX-P{i}")
        Purchase.objects.filter(course=self.python).exclude(user__email='buyer2@example.com') \
            .update(status=Purchase.STATUS_COMPLETED)

        buyer = make_user(email='ai@example.com')
        purchase = record_purchase(buyer, self.ai, payment_reference='TX-AI')
        approve_purchase(purchase.id)

    def test_summary(self):
        summary = revenue_summary()
        self.assertEqual(summary['total_revenue'], 50000 * 2 + 80000)
        self.assertEqual(summary['total_sales'], 3)
        self.assertEqual(summary['pending_revenue'], 50000)
        self.assertEqual(summary['pending_count'], 1)

    def test_summary_without_purchases(self):
        Purchase.objects.all().delete()
        summary = revenue_summary()
        self.assertEqual(summary['total_revenue'], 0)
        self.assertEqual(summary['pending_count'], 0)

    def test_breakdown_sorted_by_revenue(self):
        rows = course_revenue_breakdown()
        self.assertEqual([row['title'] for row in rows], ['Python', 'AI', 'Unsold'])

        python = rows[0]
        self.assertEqual(python['total_sales'], 2)
        self.assertEqual(python['total_revenue'], 100000)
        self.assertEqual(python['pending_sales'], 1)
        self.assertEqual(python['pending_revenue'], 50000)

        self.assertEqual(rows[2]['total_revenue'], 0)
