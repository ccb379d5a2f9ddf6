"""
Models for course purchases and promo codes.
"""

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from apps.core.models import User


class PromoCode(models.Model):
    """
    Discount code redeemed at checkout. Codes are stored upper-case.
    """
    code = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True)
    discount_percent = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        help_text="100 makes the course free"
    )
    is_active = models.BooleanField(default=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True, help_text="Empty means unlimited")
    used_count = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'purchasing_promo_codes'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.discount_percent}%)"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_exhausted(self):
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'description': self.description,
            'discount_percent': self.discount_percent,
            'is_active': self.is_active,
            'usage_limit': self.usage_limit,
            'used_count': self.used_count,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Purchase(models.Model):
    """
    A learner's purchase of a course. At most one row per (user, course).

    Paid purchases wait in 'pending' until an admin confirms the bank
    transfer; free purchases are created 'completed'.
    """
    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Approval'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    METHOD_BANK_TRANSFER = 'bank_transfer'
    METHOD_PROMO_CODE = 'promo_code'
    PAYMENT_METHOD_CHOICES = [
        (METHOD_BANK_TRANSFER, 'Bank Transfer'),
        (METHOD_PROMO_CODE, 'Promo Code'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='purchases')
    course = models.ForeignKey('learning.Course', on_delete=models.CASCADE, related_name='purchases')
    amount = models.PositiveIntegerField(help_text="Charged amount after discount")
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES,
                                      default=METHOD_BANK_TRANSFER)
    payment_id = models.CharField(max_length=255, blank=True,
                                  help_text="Transfer reference or note entered by the payer")
    transfer_code = models.CharField(max_length=20, blank=True,
                                     help_text="Memo code shown in the transfer instruction")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    promo_code = models.ForeignKey(PromoCode, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='purchases')
    purchased_at = models.DateTimeField(auto_now_add=True)

    # Workflow
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='approved_purchases')

    class Meta:
        db_table = 'purchasing_purchases'
        ordering = ['-purchased_at']
        unique_together = ['user', 'course']

    def __str__(self):
        return f"{self.user.email} - {self.course.title} ({self.status})"

    @property
    def is_completed(self):
        return self.status == self.STATUS_COMPLETED

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'course_id': self.course_id,
            'amount': self.amount,
            'payment_method': self.payment_method,
            'payment_id': self.payment_id,
            'transfer_code': self.transfer_code,
            'status': self.status,
            'promo_code_id': self.promo_code_id,
            'purchased_at': self.purchased_at.isoformat() if self.purchased_at else None,
            'approved_at': self.approved_at.isoformat() if self.approved_at else None,
        }
