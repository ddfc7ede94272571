"""Production settings for the studio booking service.

This module extends the base settings with production specific
configuration. Secrets must be provided via environment variables and
PostgreSQL is required: the booking interval exclusion constraint only
exists there.
"""

from .base import *  # noqa: F401,F403
from .base import DATABASES, get_bool_env, get_env

from django.core.exceptions import ImproperlyConfigured

# Never run with debug enabled in production
DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = [host.strip() for host in get_env('DJANGO_ALLOWED_HOSTS', '').split(',') if host.strip()]

if DATABASES['default']['ENGINE'] != 'django.db.backends.postgresql':
    raise ImproperlyConfigured('Production requires DB_ENGINE=django.db.backends.postgresql')

PAYMENT_WEBHOOK_SECRET = get_env('PAYMENT_WEBHOOK_SECRET', required=True)
PAYMENT_GATEWAY_API_KEY = get_env('PAYMENT_GATEWAY_API_KEY', required=True)

# Configure secure proxies and cookies
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_SSL_REDIRECT = get_bool_env('SECURE_SSL_REDIRECT', 'true')
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
