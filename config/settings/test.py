"""Test settings.

In-memory SQLite, eager Celery and the locmem email backend so tests run
without external services.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

SIMPLE_JWT = {
    **SIMPLE_JWT,  # noqa: F405
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': 'test-signing-key-with-enough-length-for-hs256',
    'VERIFYING_KEY': None,
    'JWK_URL': None,
    'ISSUER': None,
    'AUDIENCE': None,
}

STOREFRONT = {
    **STOREFRONT,  # noqa: F405
    'SERVICE_CITY': 'indore',
    'FREE_SHIPPING_ZIPS': ['452011'],
    'STANDARD_SHIPPING_FEE': '150.00',
    'SECURITY_DEPOSIT_PER_ITEM': '2000.00',
    'TAX_RATE': '0',
    'ALLOW_OVERBOOKING': False,
}
