# tests/test_scheduling.py
import json

import pytest
from django_celery_beat.models import IntervalSchedule, PeriodicTask

from apps.jobs.models import JobPosting, ScrapeRun
from apps.jobs.scheduling import (
    PERIODIC_TASK_NAME,
    TRIGGER_TASK,
    ensure_scrape_schedule,
    trigger_global_scrape,
)
from apps.jobs.tasks import trigger_global_scrape_task
from scrapers.heuristics import PostingSummary
from scrapers.pipeline import Strategy


def _one_posting(country, term, settings):
    return [PostingSummary(
        title=f'{term} role',
        company='Contoso',
        location=country,
        country=country,
        description='',
        source_url='https://example.com/search',
        external_id=f'gjobs_{country}',
        strategy='google_jobs',
    )]


def test_one_task_per_configured_country():
    queued = []

    outcome = trigger_global_scrape(enqueue=lambda country, term: queued.append((country, term)))

    assert queued == [
        ('United States', 'software engineer'),
        ('Germany', 'software engineer'),
        ('India', 'software engineer'),
    ]
    assert outcome['queued'] == ['United States', 'Germany', 'India']
    assert outcome['failed'] == {}


def test_enqueue_failure_does_not_stop_the_fan_out():
    queued = []

    def enqueue(country, term):
        if country == 'Germany':
            raise ConnectionError("broker unreachable")
        queued.append(country)

    outcome = trigger_global_scrape(search_term='golang', enqueue=enqueue)

    assert queued == ['United States', 'India']
    assert outcome['failed'] == {'Germany': 'broker unreachable'}
    assert outcome['search_term'] == 'golang'


def test_explicit_countries_override_settings():
    queued = []

    trigger_global_scrape(countries=['Singapore'], enqueue=lambda c, t: queued.append(c))

    assert queued == ['Singapore']


@pytest.mark.django_db
def test_default_enqueue_runs_country_tasks(monkeypatch):
    monkeypatch.setattr('scrapers.pipeline.DEFAULT_STRATEGIES', (Strategy('google_jobs', _one_posting),))

    outcome = trigger_global_scrape(countries=['Germany', 'India'], search_term='python')

    assert outcome['queued'] == ['Germany', 'India']
    assert set(JobPosting.objects.values_list('external_id', flat=True)) == {'gjobs_Germany', 'gjobs_India'}
    assert ScrapeRun.objects.filter(status=ScrapeRun.STATUS_SUCCEEDED).count() == 2


def test_beat_task_delegates_to_trigger(monkeypatch):
    seen = []

    def fake_trigger(countries=None, search_term=None, enqueue=None):
        seen.append(search_term)
        return {'queued': [], 'failed': {}, 'search_term': search_term}

    monkeypatch.setattr('apps.jobs.scheduling.trigger_global_scrape', fake_trigger)

    result = trigger_global_scrape_task.apply(kwargs={'search_term': 'rust'}).result

    assert seen == ['rust']
    assert result['search_term'] == 'rust'


@pytest.mark.django_db
def test_schedule_is_created_once():
    ensure_scrape_schedule(interval_hours=6)
    ensure_scrape_schedule(interval_hours=6)

    task = PeriodicTask.objects.get(name=PERIODIC_TASK_NAME)
    assert task.task == TRIGGER_TASK
    assert task.enabled is True
    assert json.loads(task.kwargs) == {}
    assert (task.interval.every, task.interval.period) == (6, IntervalSchedule.HOURS)
    assert PeriodicTask.objects.filter(task=TRIGGER_TASK).count() == 1


@pytest.mark.django_db
def test_schedule_interval_can_be_changed_and_disabled():
    ensure_scrape_schedule(interval_hours=6)

    task = ensure_scrape_schedule(interval_hours=12, enabled=False)

    task.refresh_from_db()
    assert task.interval.every == 12
    assert task.enabled is False
    assert PeriodicTask.objects.filter(name=PERIODIC_TASK_NAME).count() == 1


@pytest.mark.django_db
def test_schedule_defaults_to_configured_interval(settings):
    settings.SCRAPE_INTERVAL_HOURS = 4

    task = ensure_scrape_schedule()

    assert task.interval.every == 4


@pytest.mark.django_db
def test_schedule_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        ensure_scrape_schedule(interval_hours=-1)


@pytest.mark.django_db
def test_schedule_registered_by_migrate():
    # post_migrate runs while the test database is built
    assert PeriodicTask.objects.filter(name=PERIODIC_TASK_NAME, task=TRIGGER_TASK).exists()


@pytest.mark.django_db
def test_migrate_keeps_an_operator_changed_schedule():
    from django.apps import apps
    from django.db.models.signals import post_migrate

    ensure_scrape_schedule(interval_hours=12, enabled=False)
    jobs_config = apps.get_app_config('jobs')

    post_migrate.send(sender=jobs_config, app_config=jobs_config, verbosity=0, interactive=False, using='default')

    task = PeriodicTask.objects.get(name=PERIODIC_TASK_NAME)
    assert task.enabled is False
    assert task.interval.every == 12


@pytest.mark.django_db
def test_migrate_recreates_a_missing_schedule():
    from django.apps import apps
    from django.db.models.signals import post_migrate

    PeriodicTask.objects.filter(name=PERIODIC_TASK_NAME).delete()
    jobs_config = apps.get_app_config('jobs')

    post_migrate.send(sender=jobs_config, app_config=jobs_config, verbosity=0, interactive=False, using='default')

    task = PeriodicTask.objects.get(name=PERIODIC_TASK_NAME)
    assert task.enabled is True
    assert task.task == TRIGGER_TASK


@pytest.mark.django_db
def test_schedule_rejects_zero_interval():
    with pytest.raises(ValueError):
        ensure_scrape_schedule(interval_hours=0)
