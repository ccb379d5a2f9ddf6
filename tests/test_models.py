"""
Test cases for the marketplace models.
"""
from django.conf import settings
from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.core.config import get_site_config
from apps.core.models import Role, SiteSettings, User
from apps.learning.models import Certificate, Lesson
from apps.purchasing.models import PromoCode, Purchase

from .factories import make_course, make_user


class UserModelTest(TestCase):
    """Test cases for User model."""

    def test_user_creation(self):
        """Test basic user creation."""
        user = User.objects.create_user(
            email='test@example.com',
            password='testpass123',
            full_name='Test User'
        )
        self.assertEqual(user.email, 'test@example.com')
        self.assertTrue(user.check_password('testpass123'))

    def test_user_str(self):
        """Test user string representation."""
        user = make_user(email='test@example.com')
        self.assertIn('test@example.com', str(user))

    def test_default_roles_seeded(self):
        """The data migration creates the admin and learner roles."""
        self.assertTrue(Role.objects.filter(name=Role.ADMIN).exists())
        self.assertTrue(Role.objects.filter(name=Role.LEARNER).exists())

    def test_site_admin_flag(self):
        learner = make_user()
        admin = make_user(email='admin@example.com', admin=True)
        superuser = User.objects.create_superuser(email='root@example.com', password='x', full_name='Root')

        self.assertFalse(learner.is_site_admin)
        self.assertTrue(admin.is_site_admin)
        self.assertTrue(superuser.is_site_admin)


class SiteSettingsTest(TestCase):

    def setUp(self):
        cache.clear()

    def test_single_row(self):
        SiteSettings.objects.create(site_name='First')
        SiteSettings(site_name='Second').save()
        self.assertEqual(SiteSettings.objects.count(), 1)
        self.assertEqual(SiteSettings.load().site_name, 'Second')

    def test_config_cache_invalidated_on_save(self):
        self.assertEqual(get_site_config().site_name, 'Mindly Academy')

        record = SiteSettings.load()
        record.site_name = 'Renamed Academy'
        record.bank_name = 'Golomt Bank'
        record.save()

        config = get_site_config()
        self.assertEqual(config.site_name, 'Renamed Academy')
        self.assertEqual(config.bank_details()['bank_name'], 'Golomt Bank')


class CourseModelTest(TestCase):

    def test_lesson_order_unique_per_course(self):
        course = make_course(lessons=2)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Lesson.objects.create(course=course, title='Clash', order_index=1)

    def test_refresh_lessons_count(self):
        course = make_course(lessons=3)
        course.refresh_from_db()
        self.assertEqual(course.lessons_count, 3)


class PurchasingModelTest(TestCase):

    def test_promo_code_stored_upper_case(self):
        promo = PromoCode.objects.create(code='  spring10 ', discount_percent=10)
        self.assertEqual(promo.code, 'SPRING10')

    def test_one_purchase_per_user_and_course(self):
        user = make_user()
        course = make_course()
        Purchase.objects.create(user=user, course=course, amount=100, payment_id='a')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Purchase.objects.create(user=user, course=course, amount=100, payment_id='b')


class CertificateModelTest(TestCase):

    def test_certificate_number_generated(self):
        user = make_user()
        course = make_course()
        certificate = Certificate.objects.create(
            user=user, course=course, recipient_name='Test Learner', score=8, total_questions=10
        )
        self.assertTrue(certificate.certificate_number.startswith(f"CERT-{course.id}-{user.id}-"))
        self.assertEqual(certificate.percentage, 80)

    def test_one_certificate_per_user_and_course(self):
        user = make_user()
        course = make_course()
        Certificate.objects.create(user=user, course=course, recipient_name='A', score=8, total_questions=10)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Certificate.objects.create(user=user, course=course, recipient_name='B',
                                           score=9, total_questions=10)


class SettingsDefaultsTest(TestCase):

    def test_time_zone_default(self):
        self.assertEqual(settings.TIME_ZONE, 'Asia/Ulaanbaatar')
