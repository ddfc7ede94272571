"""Top-level package for Django configuration.

Settings modules per environment, the Celery application with its beat
schedule, URL routing and the WSGI entry point of the studio
booking service.
"""

# Import the Celery application as soon as Django starts. Without this
# the shared task registry will not be populated.
from .celery import app as celery_app  # noqa: F401
