"""
Utility functions for Learning Module.
"""

import logging
from io import BytesIO

from django.conf import settings
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from apps.core.exceptions import CertificateRenderError

logger = logging.getLogger(__name__)


def _draw_background(c, width, height, template_path):
    if template_path:
        # ImageReader decodes JPEG/PNG through Pillow
        c.drawImage(ImageReader(str(template_path)), 0, 0, width=width, height=height)
        return

    # Certificate border
    c.setLineWidth(3)
    c.setStrokeColor(colors.HexColor('#1e40af'))  # Blue
    c.rect(15 * mm, 15 * mm, width - 30 * mm, height - 30 * mm)
    c.setLineWidth(1)
    c.rect(19 * mm, 19 * mm, width - 38 * mm, height - 38 * mm)

    # Title
    c.setFont("Helvetica-Bold", 34)
    c.setFillColor(colors.HexColor('#1e40af'))
    c.drawCentredString(width / 2, height - 45 * mm, "Certificate of Completion")

    c.setFont("Helvetica", 16)
    c.setFillColor(colors.black)
    c.drawCentredString(width / 2, height / 2 + 15 * mm, "This certifies that")


def generate_certificate_pdf(certificate, site_name='', template_path=None):
    """
    Generate a PDF certificate for a passed certificate exam.

    Args:
        certificate: Certificate instance
        site_name: Issuer name printed in the footer
        template_path: Background image; defaults to CERTIFICATE_TEMPLATE_PATH

    Returns:
        BytesIO buffer containing the PDF

    Raises:
        CertificateRenderError: the template or PDF could not be produced.
            The certificate row itself is never modified.
    """
    if template_path is None:
        template_path = getattr(settings, 'CERTIFICATE_TEMPLATE_PATH', '')

    buffer = BytesIO()
    try:
        width, height = landscape(A4)
        c = canvas.Canvas(buffer, pagesize=(width, height))
        c.setTitle(f"Certificate {certificate.certificate_number}")

        _draw_background(c, width, height, template_path)

        # Recipient name
        c.setFont("Helvetica-Bold", 36)
        c.setFillColor(colors.Color(40 / 255, 40 / 255, 40 / 255))
        c.drawCentredString(width / 2, height / 2 - 5 * mm, certificate.recipient_name)

        # Course line
        c.setFont("Helvetica", 14)
        c.setFillColor(colors.Color(80 / 255, 80 / 255, 80 / 255))
        c.drawCentredString(
            width / 2, height / 2 - 20 * mm,
            f'has successfully completed the course "{certificate.course.title}"'
        )

        # Date and score
        c.setFont("Helvetica", 12)
        date_str = certificate.issued_at.strftime("%B %d, %Y")
        c.drawCentredString(width * 0.25, 25 * mm, date_str)
        c.drawCentredString(width * 0.75, 25 * mm,
                            f"Score: {certificate.score}/{certificate.total_questions}")

        # Certificate number
        c.setFont("Helvetica", 9)
        c.setFillColor(colors.gray)
        footer = f"Certificate Number: {certificate.certificate_number}"
        if site_name:
            footer = f"{site_name} - {footer}"
        c.drawCentredString(width / 2, 10 * mm, footer)

        c.showPage()
        c.save()
    except Exception as e:
        logger.error(f"Failed to render certificate {certificate.certificate_number}: {str(e)}")
        raise CertificateRenderError() from e

    buffer.seek(0)
    return buffer
