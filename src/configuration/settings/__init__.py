# settings/__init__.py
"""
Settings selector for the course payment backend.

DJANGO_ENV picks the module loaded here:
    development, dev, local (default)  -> development.py
    staging, stage                      -> staging.py
    production, prod                    -> production.py
    test, testing                       -> test.py

Point DJANGO_SETTINGS_MODULE at a concrete module (for example
configuration.settings.test under pytest) to bypass the selector.
"""

import os
import sys

ENVIRONMENT_MAP = {
    "development": "development",
    "dev": "development",
    "local": "development",
    "staging": "staging",
    "stage": "staging",
    "production": "production",
    "prod": "production",
    "test": "test",
    "testing": "test",
}

environment = ENVIRONMENT_MAP.get(
    os.environ.get("DJANGO_ENV", "development").lower(), "development"
)

# The autoreloader child sets RUN_MAIN; announce once per process tree
if not os.environ.get("RUN_MAIN"):
    print(f"[coursepay] Loading {environment} settings", file=sys.stderr)

if environment == "production":
    from .production import *  # noqa: F403
elif environment == "staging":
    from .staging import *  # noqa: F403
elif environment == "test":
    from .test import *  # noqa: F403
else:
    from .development import *  # noqa: F403

CURRENT_ENVIRONMENT = environment
