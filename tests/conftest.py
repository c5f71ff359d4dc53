# tests/conftest.py
import pytest
from django.core.cache import cache

from scrapers.config import ScrapeSettings
from scrapers.heuristics import PostingSummary


@pytest.fixture
def scrape_settings():
    return ScrapeSettings(
        countries=('United States', 'Germany', 'India'),
        search_term='software engineer',
        ats_domains=('greenhouse.io', 'lever.co', 'ashbyhq.com'),
        feed_urls=('https://feeds.example/one.rss', 'https://feeds.example/two.rss'),
        dork_delay_min=3.0,
        dork_delay_max=7.0,
        dork_results_per_query=20,
        feed_timeout=5.0,
    )


@pytest.fixture
def make_summary():
    def _make(**overrides):
        values = {
            'title': 'Backend Engineer',
            'company': 'Zalando',
            'location': 'Germany',
            'country': 'Germany',
            'description': 'Build payment services.',
            'source_url': 'https://boards.greenhouse.io/zalando/jobs/4471',
            'external_id': 'ats_greenhouse.io_abc123',
            'strategy': 'ats',
        }
        values.update(overrides)
        return PostingSummary(**values)
    return _make


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()
