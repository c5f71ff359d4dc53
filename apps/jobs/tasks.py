import logging
import random

from celery import shared_task
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone
from django.utils.text import slugify

from scrapers.config import ScrapeSettings
from scrapers.pipeline import run_scrape_cycle

from .models import ScrapeRun
from .services import save_postings

logger = logging.getLogger(__name__)

# The lock outlives the hard time limit so a killed worker cannot leave it forever
LOCK_GRACE_SECONDS = 120


def compute_backoff(attempt: int, base: int = None, cap: int = None, jitter: bool = True) -> int:
    """Seconds to wait before re-running a task that failed on ``attempt`` (1-based)."""
    base = settings.SCRAPE_RETRY_BACKOFF_SECONDS if base is None else base
    cap = settings.SCRAPE_RETRY_BACKOFF_MAX_SECONDS if cap is None else cap
    delay = base * (2 ** max(attempt - 1, 0))
    if jitter:
        delay += random.uniform(0, base)
    return int(min(delay, cap))


def _lock_key(country: str) -> str:
    return f"jobs:scrape-lock:{slugify(country)}"


def _acquire_country_lock(country: str, token: str) -> bool:
    """
    Single flight per country. A redelivery of the task that already holds the
    lock (same task id) is allowed through.
    """
    key = _lock_key(country)
    timeout = settings.SCRAPE_CYCLE_TIMEOUT + LOCK_GRACE_SECONDS
    if cache.add(key, token, timeout=timeout):
        return True
    return cache.get(key) == token


def _release_country_lock(country: str, token: str) -> None:
    """
    Drop the lock if ``token`` still owns it.

    The ownership check and the delete are two cache calls. If the lock
    expires between them, another task's fresh lock can be deleted; the TTL
    outlives the hard time limit by LOCK_GRACE_SECONDS, so a task still
    running at this point always holds an unexpired lock.
    """
    key = _lock_key(country)
    if cache.get(key) == token:
        cache.delete(key)


def _record(action, *args, **kwargs):
    """Run bookkeeping on ScrapeRun without letting it decide the task outcome."""
    try:
        return action(*args, **kwargs)
    except DatabaseError:
        logger.exception("Could not record scrape run state")
        return None


@shared_task(bind=True, name='jobs.scrape_country', acks_late=True)
def scrape_country(self, country: str, search_term: str = None) -> dict:
    """Run one scrape cycle for ``country``; failures are retried with backoff."""
    search_term = search_term or settings.SCRAPE_SEARCH_TERM
    attempt = self.request.retries + 1
    max_attempts = settings.SCRAPE_MAX_ATTEMPTS
    token = self.request.id or f"local-{country}-{timezone.now().timestamp()}"

    if not _acquire_country_lock(country, token):
        logger.info("Scrape for %s already in flight; skipping task %s", country, self.request.id)
        _record(
            ScrapeRun.objects.create,
            country=country, search_term=search_term, task_id=self.request.id or '',
            attempt=attempt, status=ScrapeRun.STATUS_SKIPPED, finished_at=timezone.now(),
        )
        return {'skipped': True, 'reason': 'in_flight', 'country': country}

    run = None
    try:
        run = _record(
            ScrapeRun.objects.create,
            country=country, search_term=search_term, task_id=self.request.id or '', attempt=attempt,
        )
        logger.info("[Worker] Scraping jobs for %s (attempt %d/%d)", country, attempt, max_attempts)
        result = run_scrape_cycle(
            country,
            search_term,
            ScrapeSettings.from_django(search_term=search_term),
            save=save_postings,
        )
    except Exception as exc:
        error = f"{type(exc).__name__}: {exc}"
        if attempt >= max_attempts:
            logger.error(
                "[Worker] Abandoning scrape for %s after %d attempts: %s", country, attempt, error,
            )
            if run is not None:
                _record(run.finish, ScrapeRun.STATUS_ABANDONED, error)
            return {'ok': False, 'abandoned': True, 'country': country, 'attempts': attempt, 'error': error}

        countdown = compute_backoff(attempt)
        logger.warning(
            "[Worker] Scrape for %s failed on attempt %d/%d, retrying in %ss: %s",
            country, attempt, max_attempts, countdown, error,
        )
        if run is not None:
            _record(run.finish, ScrapeRun.STATUS_FAILED, error)
        raise self.retry(exc=exc, countdown=countdown, max_retries=max_attempts - 1)
    finally:
        _release_country_lock(country, token)

    if run is not None:
        _record(run.finish, ScrapeRun.STATUS_SUCCEEDED, result=result)
    return {'ok': True, 'attempt': attempt, **result.as_dict()}


@shared_task(name='jobs.trigger_global_scrape')
def trigger_global_scrape_task(search_term: str = None) -> dict:
    """Beat entry point: fan out one scrape_country task per target country."""
    from .scheduling import trigger_global_scrape

    logger.info("Starting scheduled global job scrape...")
    return trigger_global_scrape(search_term=search_term)
