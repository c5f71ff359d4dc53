"""
Runtime settings for the scraping strategies.

Strategies never read ``django.conf.settings`` themselves; the worker builds a
:class:`ScrapeSettings` once per task and hands it down, so strategies can be
exercised with a plain instance in tests.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ScrapeSettings:
    countries: tuple[str, ...] = ()
    search_term: str = "software engineer"
    ats_domains: tuple[str, ...] = ()
    feed_urls: tuple[str, ...] = ()
    dork_delay_min: float = 3.0
    dork_delay_max: float = 7.0
    dork_results_per_query: int = 20
    feed_timeout: float = 10.0
    headless: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )

    def __post_init__(self) -> None:
        if self.dork_delay_min < 0 or self.dork_delay_max < self.dork_delay_min:
            raise ValueError(
                f"invalid politeness delay bounds: {self.dork_delay_min}..{self.dork_delay_max}"
            )

    @classmethod
    def from_django(cls, **overrides: Any) -> "ScrapeSettings":
        """Build settings from the Django project's ``SCRAPE_*`` values."""
        from django.conf import settings

        values = {
            "countries": tuple(settings.SCRAPE_TARGET_COUNTRIES),
            "search_term": settings.SCRAPE_SEARCH_TERM,
            "ats_domains": tuple(settings.SCRAPE_ATS_DOMAINS),
            "feed_urls": tuple(settings.SCRAPE_FEED_URLS),
            "dork_delay_min": float(settings.SCRAPE_DORK_DELAY_MIN),
            "dork_delay_max": float(settings.SCRAPE_DORK_DELAY_MAX),
            "dork_results_per_query": int(settings.SCRAPE_DORK_RESULTS_PER_QUERY),
            "feed_timeout": float(settings.SCRAPE_FEED_TIMEOUT),
            "headless": bool(settings.SCRAPE_BROWSER_HEADLESS),
        }
        values.update(overrides)
        return cls(**values)
