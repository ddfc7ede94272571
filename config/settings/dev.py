"""Development settings for the studio booking service.

This module extends the base settings with development specific
configuration: debug mode, permissive hosts and a local webhook secret
so signed webhooks can be replayed by hand. Do not use these settings in
production!
"""

from .base import *  # noqa: F401,F403
from .base import get_env

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Development secret for locally signed webhook deliveries
PAYMENT_WEBHOOK_SECRET = get_env('PAYMENT_WEBHOOK_SECRET', 'dev-webhook-secret')

# Plain static files storage, no manifest needed during development
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
