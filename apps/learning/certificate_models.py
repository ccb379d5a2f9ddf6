"""
Certificate model for the certificate exam.
"""

from django.db import models
from apps.core.models import User
from apps.core.utils import round_half_up_div
from .models import Course
import uuid
from datetime import datetime


class Certificate(models.Model):
    """
    Issued once per user and course when the certificate exam is passed.
    The row is immutable after creation.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='certificates')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='certificates')
    recipient_name = models.CharField(max_length=255)
    score = models.PositiveIntegerField()
    total_questions = models.PositiveIntegerField()
    certificate_number = models.CharField(max_length=50, unique=True, editable=False)
    issued_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'lms_certificates'
        unique_together = ['user', 'course']
        ordering = ['-issued_at']

    def __str__(self):
        return f"Certificate {self.certificate_number} - {self.recipient_name} - {self.course.title}"

    @property
    def percentage(self):
        if not self.total_questions:
            return 0
        return round_half_up_div(100 * self.score, self.total_questions)

    def save(self, *args, **kwargs):
        if not self.certificate_number:
            # Generate unique certificate number
            timestamp = datetime.now().strftime('%Y%m%d%H%M%S')
            unique_id = str(uuid.uuid4())[:8].upper()
            self.certificate_number = f"CERT-{self.course_id}-{self.user_id}-{timestamp}-{unique_id}"
        super().save(*args, **kwargs)

    def to_dict(self):
        return {
            'certificate_number': self.certificate_number,
            'recipient_name': self.recipient_name,
            'course_id': self.course_id,
            'score': self.score,
            'total_questions': self.total_questions,
            'percentage': self.percentage,
            'issued_at': self.issued_at.isoformat() if self.issued_at else None,
        }
