"""
Forms for Admin Portal module.
"""

from django import forms
from django.forms.models import model_to_dict
from apps.core.models import SiteSettings


class SiteSettingsForm(forms.ModelForm):
    class Meta:
        model = SiteSettings
        fields = ['site_name', 'site_description', 'contact_email', 'contact_phone',
                  'bank_name', 'bank_account_number', 'bank_account_name']


def merged_form_data(instance, form_class, payload):
    """
    Form data for a partial update: current field values overlaid with the
    fields present in the JSON payload.
    """
    fields = form_class._meta.fields
    data = model_to_dict(instance, fields=fields)
    data.update({key: value for key, value in payload.items() if key in fields})
    return data
