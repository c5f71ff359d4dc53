import logging

from django.db import DatabaseError
from django.db.models.signals import post_migrate
from django.dispatch import receiver

from .scheduling import ensure_scrape_schedule

logger = logging.getLogger(__name__)


@receiver(post_migrate, dispatch_uid='jobs.ensure_scrape_schedule')
def ensure_schedule_after_migrate(sender, app_config=None, **kwargs):
    """Register the global scrape beat entry once the beat tables exist; an existing entry is left as is."""
    if app_config is None or app_config.name != 'apps.jobs':
        return
    try:
        ensure_scrape_schedule(create_only=True)
    except DatabaseError as e:
        # django_celery_beat tables may not be migrated yet on a partial migrate
        logger.debug("Scrape schedule registration skipped: %s", e)
