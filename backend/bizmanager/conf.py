"""Application settings with defaults, read from ``settings.BIZMANAGER``."""

from decimal import Decimal

from django.conf import settings

COERCE = 'coerce'
STRICT = 'strict'

DEFAULTS = {
    'NUMERIC_INPUT_POLICY': COERCE,
    'SEED_DEMO_DATA': False,
    'TAX_RATE': Decimal('0.10'),
    'RECENT_TRANSACTIONS_LIMIT': 4,
    'ACTIVITY_LOG_LIMIT': 500,
}


def get_setting(name):
    overrides = getattr(settings, 'BIZMANAGER', None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]


def numeric_input_policy():
    policy = str(get_setting('NUMERIC_INPUT_POLICY')).lower()
    if policy not in (COERCE, STRICT):
        raise ValueError(f"Unknown NUMERIC_INPUT_POLICY {policy!r}; expected 'coerce' or 'strict'.")
    return policy


def tax_rate():
    return Decimal(str(get_setting('TAX_RATE')))
