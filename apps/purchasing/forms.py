"""
Forms for the purchase flow and promo code management.
"""

from django import forms
from .models import PromoCode


class PromoValidateForm(forms.Form):
    code = forms.CharField(max_length=50)
    course_id = forms.IntegerField(min_value=1)


class PurchaseForm(forms.Form):
    course_id = forms.IntegerField(min_value=1)
    promo_code_id = forms.IntegerField(min_value=1, required=False)
    amount = forms.IntegerField(min_value=0, required=False)
    payment_reference = forms.CharField(max_length=255, required=False)
    transfer_code = forms.CharField(max_length=20, required=False)


class PromoCodeForm(forms.ModelForm):
    class Meta:
        model = PromoCode
        fields = ['code', 'description', 'discount_percent', 'is_active', 'usage_limit', 'expires_at']

    def clean_code(self):
        code = self.cleaned_data['code'].strip().upper()
        if not code:
            raise forms.ValidationError("Code is required.")
        return code
