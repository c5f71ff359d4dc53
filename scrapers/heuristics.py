"""
Extraction heuristics shared by the scraping strategies.

Pure functions over strings; nothing here touches the browser or the network.
"""

import hashlib
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from bs4 import BeautifulSoup
from django.utils import timezone

UNKNOWN_COMPANY = 'Unknown'
REMOTE = 'Remote'
ORIGIN_SCRAPER = 'scraper'

# Ordered: the first delimiter found in the title decides the split.
TITLE_DELIMITERS = (' at ', ' - ', ' | ')

_ELLIPSIS_RE = re.compile(r'(\.\.\.|…)$')
_WHITESPACE_RE = re.compile(r'\s+')


@dataclass
class PostingSummary:
    """Normalized posting produced by a strategy and consumed by the upsert service."""
    title: str
    company: str
    location: str
    country: str
    description: str
    source_url: str
    external_id: str
    strategy: str
    origin: str = ORIGIN_SCRAPER
    posted_at: datetime = field(default_factory=timezone.now)


def clean_text(value: Optional[str]) -> str:
    """Collapse whitespace and trim."""
    if not value:
        return ''
    return _WHITESPACE_RE.sub(' ', str(value)).strip()


def _strip_ellipsis(value: str) -> str:
    return _ELLIPSIS_RE.sub('', value).strip()


def split_title_company(raw_title: Optional[str]) -> tuple[str, str]:
    """
    Split a search-result heading like "Backend Engineer at Zalando" into
    (title, company).

    Delimiters are tried in TITLE_DELIMITERS order and the split happens at the
    last occurrence of the first one present. This is a best-effort heuristic:
    headings with several delimiters are split however that rule falls, and a
    heading without any delimiter keeps its full text as title with an
    "Unknown" company.
    """
    text = clean_text(raw_title)
    for delimiter in TITLE_DELIMITERS:
        if delimiter in text:
            title, company = text.rsplit(delimiter, 1)
            title = _strip_ellipsis(title)
            company = _strip_ellipsis(company) or UNKNOWN_COMPANY
            return title, company
    return _strip_ellipsis(text), UNKNOWN_COMPANY


def tag_country(title: Optional[str], description: Optional[str], countries: Iterable[str]) -> str:
    """
    Return the configured country named in the title or description, else "Remote".

    When several configured countries appear, the last one in configuration
    order wins.
    """
    title = title or ''
    description = description or ''
    tagged = REMOTE
    for country in countries:
        if country and (country in title or country in description):
            tagged = country
    return tagged


def stable_id(prefix: str, *parts: str) -> str:
    """Deterministic identifier: prefix plus a truncated SHA-256 of the joined parts."""
    digest = hashlib.sha256('\x1f'.join(p or '' for p in parts).encode('utf-8')).hexdigest()
    return f'{prefix}_{digest[:32]}'


def ats_external_id(domain: str, url: str) -> str:
    return stable_id(f'ats_{domain}', url)


def widget_external_id(title: str, company: str) -> str:
    # Two openings with the same title at the same company collapse into one row.
    return stable_id('gjobs', title + company)


def feed_external_id(guid: str) -> str:
    return stable_id('rss', guid)


def html_to_text(value: Optional[str]) -> str:
    """Reduce an HTML fragment (feed descriptions usually are) to plain text."""
    if not value:
        return ''
    if '<' not in value:
        return clean_text(value)
    soup = BeautifulSoup(value, 'html.parser')
    return clean_text(soup.get_text(' '))


def truncate_description(text: str, limit: int = 500) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + '...'
