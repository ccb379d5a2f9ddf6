"""
Test cases for certificate PDF rendering and download.
"""
import os
import tempfile
from unittest import mock

from django.core.cache import cache
from django.test import TestCase, override_settings
from PIL import Image

from apps.core.exceptions import CertificateRenderError
from apps.learning.models import Certificate
from apps.learning.utils import generate_certificate_pdf

from .factories import PASSWORD, make_course, make_user


class CertificatePdfTest(TestCase):

    def setUp(self):
        self.user = make_user()
        self.course = make_course(title='Data Analysis')
        self.certificate = Certificate.objects.create(
            user=self.user, course=self.course, recipient_name='Bat-Erdene Dorj',
            score=9, total_questions=10,
        )

    def test_render_without_template(self):
        buffer = generate_certificate_pdf(self.certificate, site_name='Mindly', template_path='')
        self.assertTrue(buffer.getvalue().startswith(b'%PDF'))

    def test_render_with_template_image(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'template.png')
            Image.new('RGB', (842, 595), 'white').save(path)
            buffer = generate_certificate_pdf(self.certificate, template_path=path)
        self.assertTrue(buffer.getvalue().startswith(b'%PDF'))

    def test_missing_template_raises_render_error(self):
        with self.assertRaises(CertificateRenderError):
            generate_certificate_pdf(self.certificate, template_path='/nonexistent/template.png')

    def test_render_failure_leaves_certificate_untouched(self):
        number = self.certificate.certificate_number
        with self.assertRaises(CertificateRenderError):
            generate_certificate_pdf(self.certificate, template_path='/nonexistent/template.png')
        self.assertEqual(Certificate.objects.get(pk=self.certificate.pk).certificate_number, number)


@override_settings(CERTIFICATE_TEMPLATE_PATH='')
class CertificateDownloadViewTest(TestCase):

    def setUp(self):
        cache.clear()
        self.user = make_user()
        self.course = make_course(title='Data Analysis')
        self.url = f'/courses/{self.course.id}/certificate.pdf'
        self.client.login(email=self.user.email, password=PASSWORD)

    def test_download(self):
        Certificate.objects.create(user=self.user, course=self.course, recipient_name='Bat-Erdene',
                                   score=8, total_questions=10)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('attachment;', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_no_certificate(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 404)

    def test_render_failure_is_retryable(self):
        Certificate.objects.create(user=self.user, course=self.course, recipient_name='Bat-Erdene',
                                   score=8, total_questions=10)
        with mock.patch('apps.learning.views.generate_certificate_pdf',
                        side_effect=CertificateRenderError()):
            response = self.client.get(self.url)
        self.assertEqual(response.status_code, 503)
        self.assertTrue(response.json()['retryable'])

    def test_requires_login(self):
        self.client.logout()
        self.assertEqual(self.client.get(self.url).status_code, 401)
