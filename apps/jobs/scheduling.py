"""
Global scrape scheduling.

Celery beat owns the clock: ``ensure_scrape_schedule`` keeps a single
django-celery-beat interval entry pointing at ``jobs.trigger_global_scrape``,
and that task calls :func:`trigger_global_scrape` to fan out per-country work.
Beat runs as its own process and is started/stopped with it; nothing here
keeps state between calls.
"""

import json
import logging

from django.conf import settings
from django.db import transaction
from django_celery_beat.models import IntervalSchedule, PeriodicTask

logger = logging.getLogger(__name__)

PERIODIC_TASK_NAME = 'global-job-scrape'
TRIGGER_TASK = 'jobs.trigger_global_scrape'


def trigger_global_scrape(countries=None, search_term=None, enqueue=None) -> dict:
    """
    Queue one scrape task per target country.

    A country whose enqueue fails is logged and reported; the remaining
    countries are still queued.
    """
    if enqueue is None:
        from .tasks import scrape_country

        def enqueue(country, term):
            return scrape_country.delay(country=country, search_term=term)

    countries = list(countries if countries is not None else settings.SCRAPE_TARGET_COUNTRIES)
    search_term = search_term or settings.SCRAPE_SEARCH_TERM

    queued, failed = [], {}
    for country in countries:
        try:
            enqueue(country, search_term)
        except Exception as exc:
            logger.exception("Failed to enqueue scrape for %s", country)
            failed[country] = str(exc)
            continue
        queued.append(country)

    logger.info(
        "Global scrape queued for %d/%d countries (%r)", len(queued), len(countries), search_term,
    )
    return {'queued': queued, 'failed': failed, 'search_term': search_term}


def ensure_scrape_schedule(interval_hours=None, enabled=True, create_only=False) -> PeriodicTask:
    """
    Create or update the beat entry that triggers the global scrape.

    With ``create_only`` an existing entry is returned untouched, so an
    interval or pause set by an operator survives later calls.
    """
    if create_only:
        existing = PeriodicTask.objects.filter(name=PERIODIC_TASK_NAME).first()
        if existing is not None:
            return existing

    hours = int(settings.SCRAPE_INTERVAL_HOURS if interval_hours is None else interval_hours)
    if hours <= 0:
        raise ValueError(f"interval must be a positive number of hours, got {hours}")

    with transaction.atomic():
        interval, _ = IntervalSchedule.objects.get_or_create(
            every=hours,
            period=IntervalSchedule.HOURS,
        )
        task, created = PeriodicTask.objects.update_or_create(
            name=PERIODIC_TASK_NAME,
            defaults={
                'task': TRIGGER_TASK,
                'interval': interval,
                'crontab': None,
                'kwargs': json.dumps({}),
                'enabled': enabled,
                'description': 'Queue one scrape task per target country',
            },
        )
    logger.info(
        "%s periodic task %s: every %d hours (enabled=%s)",
        'Created' if created else 'Updated', PERIODIC_TASK_NAME, hours, enabled,
    )
    return task
