# tests/test_commands.py
import json
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django_celery_beat.models import PeriodicTask

from apps.jobs.models import JobPosting
from apps.jobs.scheduling import PERIODIC_TASK_NAME
from scrapers.heuristics import PostingSummary
from scrapers.pipeline import Strategy

pytestmark = pytest.mark.django_db


def _posting(country, term, settings):
    return [PostingSummary(
        title='Platform Engineer',
        company='Contoso',
        location=country,
        country=country,
        description='',
        source_url='https://example.com/search',
        external_id=f'gjobs_cmd_{country}',
        strategy='google_jobs',
    )]


def _failing(country, term, settings):
    raise RuntimeError("blocked")


def test_trigger_scrape_queues_given_countries(monkeypatch):
    queued = []
    monkeypatch.setattr(
        'apps.jobs.management.commands.trigger_scrape.trigger_global_scrape',
        lambda countries, search_term: queued.append((countries, search_term)) or {
            'queued': countries, 'failed': {}, 'search_term': search_term,
        },
    )
    out = StringIO()

    call_command('trigger_scrape', '--country', 'Germany', '--country', 'India', '--search-term', 'go', stdout=out)

    assert queued == [(['Germany', 'India'], 'go')]
    assert "Queued 2 of 2 countries" in out.getvalue()


def test_trigger_scrape_sync_runs_cycle_inline(monkeypatch):
    monkeypatch.setattr('scrapers.pipeline.DEFAULT_STRATEGIES', (Strategy('google_jobs', _posting),))
    out = StringIO()

    call_command('trigger_scrape', '--country', 'Germany', '--sync', stdout=out)

    assert JobPosting.objects.filter(external_id='gjobs_cmd_Germany').exists()
    report = json.loads(out.getvalue())
    assert report['country'] == 'Germany'
    assert report['saved'] == 1


def test_trigger_scrape_sync_reports_failed_cycle(monkeypatch):
    monkeypatch.setattr('scrapers.pipeline.DEFAULT_STRATEGIES', (Strategy('ats', _failing),))
    out, err = StringIO(), StringIO()

    call_command('trigger_scrape', '--country', 'Germany', '--sync', stdout=out, stderr=err)

    assert "all strategies failed for Germany" in err.getvalue()
    assert not JobPosting.objects.exists()


def test_upsert_scrape_schedule_command():
    out = StringIO()

    call_command('upsert_scrape_schedule', '--interval-hours', '3', '--disable', stdout=out)

    task = PeriodicTask.objects.get(name=PERIODIC_TASK_NAME)
    assert task.interval.every == 3
    assert task.enabled is False
    assert "Schedule upserted" in out.getvalue()


def test_upsert_scrape_schedule_rejects_bad_interval():
    with pytest.raises(CommandError):
        call_command('upsert_scrape_schedule', '--interval-hours', '-2')


def test_upsert_scrape_schedule_rejects_zero_interval():
    with pytest.raises(CommandError):
        call_command('upsert_scrape_schedule', '--interval-hours', '0')
