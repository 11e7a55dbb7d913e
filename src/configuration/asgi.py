"""
ASGI entry point for the course payment backend.

Only plain HTTP is served; there are no websocket routes.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "configuration.settings")

application = get_asgi_application()
