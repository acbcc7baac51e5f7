import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pharmacy_backend.settings")

app = Celery("pharmacy_backend")

# All CELERY_* keys in settings.py configure this app
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
