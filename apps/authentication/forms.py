"""
Forms for authentication module.
"""

from django import forms
from django.contrib.auth import get_user_model, authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError

User = get_user_model()


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)

    def __init__(self, *args, request=None, **kwargs):
        self.request = request
        self.user = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        email = cleaned_data.get('email')
        password = cleaned_data.get('password')

        if not email or not password:
            return cleaned_data

        self.user = authenticate(self.request, username=email.lower(), password=password)
        if self.user is None:
            raise ValidationError("Invalid email or password.")
        if not self.user.is_active:
            raise ValidationError("This account has been deactivated.")
        return cleaned_data

    def get_user(self):
        return self.user


class SignupForm(forms.Form):
    """Learner self-registration."""
    email = forms.EmailField()
    full_name = forms.CharField(max_length=255)
    password = forms.CharField(strip=False)

    def clean_email(self):
        email = self.cleaned_data['email'].lower()
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError("An account with this email already exists.")
        return email

    def clean_full_name(self):
        full_name = self.cleaned_data['full_name'].strip()
        if not full_name:
            raise ValidationError("Full name is required.")
        return full_name

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get('password')
        if password:
            candidate = User(email=cleaned_data.get('email', ''), full_name=cleaned_data.get('full_name', ''))
            try:
                validate_password(password, user=candidate)
            except ValidationError as e:
                self.add_error('password', e)
        return cleaned_data
