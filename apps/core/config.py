"""
Site-wide configuration loaded from the SiteSettings record.
"""

from dataclasses import dataclass, asdict

from django.conf import settings
from django.core.cache import cache

CACHE_KEY = 'site_config'


@dataclass(frozen=True)
class SiteConfig:
    site_name: str
    site_description: str
    contact_email: str
    contact_phone: str
    bank_name: str
    bank_account_number: str
    bank_account_name: str

    def bank_details(self):
        return {
            'bank_name': self.bank_name,
            'account_number': self.bank_account_number,
            'account_name': self.bank_account_name,
        }

    def to_dict(self):
        return asdict(self)


def _load_site_config():
    from .models import SiteSettings

    record = SiteSettings.load()
    return SiteConfig(
        site_name=record.site_name,
        site_description=record.site_description,
        contact_email=record.contact_email,
        contact_phone=record.contact_phone,
        bank_name=record.bank_name,
        bank_account_number=record.bank_account_number,
        bank_account_name=record.bank_account_name,
    )


def get_site_config():
    """Return the cached SiteConfig, reading the database on a cache miss."""
    timeout = getattr(settings, 'SITE_CONFIG_CACHE_SECONDS', 300)
    return cache.get_or_set(CACHE_KEY, _load_site_config, timeout)


def clear_site_config_cache():
    cache.delete(CACHE_KEY)
