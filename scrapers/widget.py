"""
Search-engine job widget strategy.

Queries the engine's structured jobs surface ("<term> jobs in <country>") and
reads the rendered listing. The widget markup changes often, so extraction
keys off generic structure: list items carrying an ARIA heading.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup

from .browser import SessionFactory, open_browser_session
from .config import ScrapeSettings
from .heuristics import UNKNOWN_COMPANY, PostingSummary, clean_text, widget_external_id

logger = logging.getLogger(__name__)

STRATEGY = 'google_jobs'
SEARCH_URL = 'https://www.google.com/search'
DEFAULT_DESCRIPTION = 'View details to apply.'
NAVIGATION_TIMEOUT_MS = 45000
LISTING_TIMEOUT_MS = 10000
# Company lines in the widget are short; longer blocks are snippets or metadata
MAX_COMPANY_LENGTH = 30

WIDGET_VIEWPORT = {'width': 1366, 'height': 768}


def build_widget_url(search_term: str, country: str) -> str:
    return f'{SEARCH_URL}?{urlencode({"q": f"{search_term} jobs in {country}", "ibp": "htl;jobs"})}'


def _guess_company(item, title: str) -> str:
    for div in item.find_all('div'):
        text = clean_text(div.get_text(' '))
        if text and len(text) < MAX_COMPANY_LENGTH and text != title:
            return text
    return UNKNOWN_COMPANY


def parse_widget_listings(html: str, country: str, page_url: Optional[str] = None) -> list[PostingSummary]:
    soup = BeautifulSoup(html or '', 'html.parser')
    results = []
    seen_ids = set()

    for item in soup.find_all('li'):
        heading = item.select_one('[role="heading"]')
        if not heading:
            continue
        title = clean_text(heading.get_text(' '))
        if not title:
            continue
        company = _guess_company(item, title)
        external_id = widget_external_id(title, company)
        # Nested <li> elements can repeat the same card
        if external_id in seen_ids:
            continue
        seen_ids.add(external_id)

        results.append(PostingSummary(
            title=title,
            company=company,
            location=country,
            country=country,
            description=DEFAULT_DESCRIPTION,
            # The widget rarely exposes a direct link without clicking through
            source_url=page_url or '',
            external_id=external_id,
            strategy=STRATEGY,
        ))
    return results


def scrape_google_jobs(
    country: str,
    search_term: str,
    settings: ScrapeSettings,
    session_factory: SessionFactory = open_browser_session,
) -> list[PostingSummary]:
    with session_factory(settings, viewport=WIDGET_VIEWPORT) as session:
        session.navigate(build_widget_url(search_term, country), timeout_ms=NAVIGATION_TIMEOUT_MS)
        if not session.wait_for('ul', timeout_ms=LISTING_TIMEOUT_MS):
            logger.info("[GoogleJobs] Listing container did not render for %s; parsing what loaded", country)
        jobs = parse_widget_listings(session.content(), country, session.url)

    if jobs:
        logger.info("[GoogleJobs] Found %d jobs via widget for %s", len(jobs), country)
    else:
        logger.warning("[GoogleJobs] No widget listings for %s", country)
    return jobs
