import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'job_aggregator.settings')
# Playwright's sync API runs its own event loop in the worker thread; ORM calls
# made around a browser session must not be refused as "async unsafe"
os.environ.setdefault('DJANGO_ALLOW_ASYNC_UNSAFE', 'true')

app = Celery('job_aggregator')

app.config_from_object('django.conf:settings', namespace='CELERY')

# Use Django's app discovery
app.autodiscover_tasks()
