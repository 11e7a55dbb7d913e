"""
WSGI entry point for the course payment backend.

Gunicorn and friends load ``application`` from here. DJANGO_ENV picks the
settings module (see configuration/settings/__init__.py).
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "configuration.settings")

application = get_wsgi_application()
