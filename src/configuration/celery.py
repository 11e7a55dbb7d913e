import os

from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "configuration.settings")

app = Celery("coursepay")

# Everything prefixed CELERY_ in Django settings, including CELERY_IMPORTS
# which lists coursepay.tasks.tasks
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
