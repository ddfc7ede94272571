"""Test settings for the studio booking service.

File-backed SQLite so that threads get their own connections, eager
Celery, a fixed webhook secret and the sandbox payment gateway (no API
key configured).
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test.sqlite3',
        'OPTIONS': {'transaction_mode': 'IMMEDIATE', 'timeout': 20},
        'TEST': {'NAME': BASE_DIR / 'test_studio_booking.sqlite3'},
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

TIME_ZONE = 'UTC'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

BOOKING_HOLD_TTL_MINUTES = 15
BOOKING_SLOT_BUFFER_MINUTES = 15

PAYMENT_GATEWAY_CLASS = 'apps.payments.gateway.HttpPaymentGateway'
PAYMENT_GATEWAY_API_KEY = ''
PAYMENT_WEBHOOK_SECRET = 'test-webhook-secret'
PAYMENT_WEBHOOK_TOLERANCE_SECONDS = 300

SITE_URL = 'http://testserver'
