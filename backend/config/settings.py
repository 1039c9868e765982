"""Django settings for the business manager backend.

Everything environment specific is read from environment variables so the
same module serves development, tests and deployment.
"""

import os
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-business-manager-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'rest_framework',
    'bizmanager.apps.BizManagerConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'

WSGI_APPLICATION = 'config.wsgi.application'

# All state lives in the in-memory business store; no tables are used.
DATABASES = {}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('DJANGO_TIME_ZONE', 'UTC')
USE_I18N = False
USE_TZ = True

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'UNAUTHENTICATED_USER': None,
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

BIZMANAGER = {
    'NUMERIC_INPUT_POLICY': os.environ.get('BIZMANAGER_NUMERIC_INPUT_POLICY', 'coerce'),
    'SEED_DEMO_DATA': env_bool('BIZMANAGER_SEED_DEMO_DATA', False),
    'TAX_RATE': Decimal(os.environ.get('BIZMANAGER_TAX_RATE', '0.10')),
    'RECENT_TRANSACTIONS_LIMIT': int(os.environ.get('BIZMANAGER_RECENT_TRANSACTIONS_LIMIT', '4')),
    'ACTIVITY_LOG_LIMIT': int(os.environ.get('BIZMANAGER_ACTIVITY_LOG_LIMIT', '500')),
}

LOG_LEVEL = os.environ.get('BIZMANAGER_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'loggers': {
        'bizmanager': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
