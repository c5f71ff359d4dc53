"""
Aggregator feed strategy: RSS/Atom feeds from remote job boards, over plain HTTP.
"""

import logging
from datetime import datetime, timezone as dt_timezone
from typing import Callable, Iterable, Optional

import feedparser
import requests
from dateutil import parser as date_parser
from django.utils import timezone

from .config import ScrapeSettings
from .exceptions import TASK_FATAL_ERRORS, FeedError
from .heuristics import (
    REMOTE,
    PostingSummary,
    clean_text,
    feed_external_id,
    html_to_text,
    tag_country,
    truncate_description,
)

logger = logging.getLogger(__name__)

STRATEGY = 'rss'
FEED_COMPANY = 'Aggregator Job'
UNKNOWN_ROLE = 'Unknown Role'
DESCRIPTION_LIMIT = 500


def _requests_session(user_agent: str) -> requests.Session:
    session = requests.Session()
    session.headers.update({
        "User-Agent": user_agent,
        "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
    })
    return session


def fetch_feed(url: str, timeout: float, session: Optional[requests.Session] = None) -> bytes:
    """Download a feed document; HTTP and network errors surface as FeedError."""
    http = session or requests
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FeedError(f"could not fetch {url}: {exc}") from exc
    return resp.content


def _entry_published(entry) -> datetime:
    parsed = entry.get('published_parsed') or entry.get('updated_parsed')
    if parsed:
        return datetime(*parsed[:6], tzinfo=dt_timezone.utc)
    raw = entry.get('published') or entry.get('updated')
    if raw:
        try:
            dt = date_parser.parse(raw, fuzzy=True)
        except (ValueError, TypeError, OverflowError):
            return timezone.now()
        if timezone.is_naive(dt):
            dt = timezone.make_aware(dt, dt_timezone.utc)
        return dt
    return timezone.now()


def parse_feed(content, countries: Iterable[str], feed_url: str = '') -> list[PostingSummary]:
    """
    Parse an RSS 2.0 or Atom document into postings.

    Feeds carry no structured location, so the country is a substring match of
    the configured countries against title and description ("Remote" if none).
    """
    feed = feedparser.parse(content)
    if not feed.entries and (feed.bozo or not feed.get('version')):
        raise FeedError(f"malformed feed {feed_url}: {feed.get('bozo_exception')}")

    countries = list(countries)
    jobs = []
    for entry in feed.entries:
        title = clean_text(entry.get('title')) or UNKNOWN_ROLE
        link = entry.get('link') or entry.get('id') or ''
        guid = entry.get('id') or link
        if not guid:
            logger.debug("[RSS] Skipping entry without guid or link in %s", feed_url)
            continue
        raw_description = entry.get('description') or entry.get('summary') or ''
        description = html_to_text(raw_description)

        jobs.append(PostingSummary(
            title=title,
            company=FEED_COMPANY,
            location=REMOTE,
            country=tag_country(title, description, countries),
            description=truncate_description(description, DESCRIPTION_LIMIT),
            source_url=link,
            external_id=feed_external_id(guid),
            strategy=STRATEGY,
            posted_at=_entry_published(entry),
        ))
    return jobs


def scrape_aggregator_feeds(
    country: str,
    search_term: str,
    settings: ScrapeSettings,
    fetch: Optional[Callable[[str, float], bytes]] = None,
) -> list[PostingSummary]:
    """
    Poll every configured feed. Feeds are not country-specific: each item is
    tagged by :func:`parse_feed`, and a failing feed never stops the others.
    """
    if fetch is None:
        http = _requests_session(settings.user_agent)

        def fetch(url, timeout):
            return fetch_feed(url, timeout, session=http)

    logger.info("[RSS] Scraping %d aggregator feeds (cycle for %s)", len(settings.feed_urls), country)
    jobs = []
    for feed_url in settings.feed_urls:
        try:
            content = fetch(feed_url, settings.feed_timeout)
            found = parse_feed(content, settings.countries, feed_url)
        except TASK_FATAL_ERRORS:
            raise
        except FeedError as exc:
            logger.warning("[RSS] %s", exc)
            continue
        except Exception:
            logger.exception("[RSS] Unexpected error while polling %s", feed_url)
            continue

        if found:
            logger.info("[RSS] Found %d jobs from %s", len(found), feed_url)
        jobs.extend(found)
    return jobs
