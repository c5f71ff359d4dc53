"""
ATS dorking strategy.

Uses search-engine ``site:`` queries to find listings hosted on applicant
tracking systems, e.g. ``site:greenhouse.io (software engineer OR developer OR
engineer) "Germany"``. One browser session is shared by every domain of a
country cycle; consecutive queries are separated by a randomized pause because
back-to-back queries get the whole session blocked.
"""

import logging
import random
import time
from typing import Callable, Optional
from urllib.parse import parse_qs, urlencode, urlparse

from bs4 import BeautifulSoup

from .browser import BrowserSession, SessionFactory, open_browser_session
from .config import ScrapeSettings
from .exceptions import TASK_FATAL_ERRORS
from .heuristics import PostingSummary, ats_external_id, clean_text, split_title_company

logger = logging.getLogger(__name__)

STRATEGY = 'ats'
SEARCH_URL = 'https://www.google.com/search'
DEFAULT_SNIPPET = 'Click to apply'
NAVIGATION_TIMEOUT_MS = 30000


def build_dork_query(domain: str, search_term: str, country: str) -> str:
    return f'site:{domain} ({search_term} OR developer OR engineer) "{country}"'


def build_search_url(query: str, num_results: int = 20) -> str:
    return f'{SEARCH_URL}?{urlencode({"q": query, "num": num_results})}'


def _resolve_result_link(href: Optional[str]) -> Optional[str]:
    """Unwrap ``/url?q=`` redirect links and drop anything that is not http(s)."""
    if not href:
        return None
    if href.startswith('/url?'):
        target = parse_qs(urlparse(href).query).get('q')
        href = target[0] if target else None
    if not href or not href.startswith(('http://', 'https://')):
        return None
    return href


def parse_search_results(html: str, domain: str, country: str) -> list[PostingSummary]:
    """Turn a result page into postings: one per ``.g`` block with a heading and a link."""
    soup = BeautifulSoup(html or '', 'html.parser')
    results = []
    seen_urls = set()

    for block in soup.select('.g'):
        title_el = block.find('h3')
        link_el = block.find('a', href=True)
        if not title_el or not link_el:
            continue
        url = _resolve_result_link(link_el.get('href'))
        if not url or url in seen_urls:
            continue
        seen_urls.add(url)

        snippet_el = block.select_one('.VwiC3b') or block.select_one('div[style*="-webkit-line-clamp"]')
        description = clean_text(snippet_el.get_text(' ')) if snippet_el else ''

        title, company = split_title_company(title_el.get_text(' '))
        if not title:
            continue
        results.append(PostingSummary(
            title=title,
            company=company,
            location=country,
            country=country,
            description=description or DEFAULT_SNIPPET,
            source_url=url,
            external_id=ats_external_id(domain, url),
            strategy=STRATEGY,
        ))
    return results


def scrape_domain(
    session: BrowserSession,
    domain: str,
    country: str,
    search_term: str,
    settings: ScrapeSettings,
) -> list[PostingSummary]:
    query = build_dork_query(domain, search_term, country)
    session.navigate(build_search_url(query, settings.dork_results_per_query), timeout_ms=NAVIGATION_TIMEOUT_MS)
    return parse_search_results(session.content(), domain, country)


def scrape_ats_jobs(
    country: str,
    search_term: str,
    settings: ScrapeSettings,
    session_factory: SessionFactory = open_browser_session,
    sleep: Callable[[float], None] = time.sleep,
) -> list[PostingSummary]:
    """Dork every configured ATS domain for ``country``; a failing domain is skipped."""
    jobs = []
    with session_factory(settings) as session:
        for index, domain in enumerate(settings.ats_domains):
            if index:
                # Politeness delay between queries, also after a failed domain
                sleep(random.uniform(settings.dork_delay_min, settings.dork_delay_max))
            try:
                found = scrape_domain(session, domain, country, search_term, settings)
            except TASK_FATAL_ERRORS:
                raise
            except Exception:
                logger.exception("[ATS] %s dorking failed for %s", domain, country)
                continue

            if found:
                logger.info("[ATS] Found %d jobs via %s dorking for %s", len(found), domain, country)
            else:
                logger.warning("[ATS] No jobs found for %s in %s (might be blocked or empty)", domain, country)
            jobs.extend(found)
    return jobs
