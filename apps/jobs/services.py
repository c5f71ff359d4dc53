"""
Upsert service: persists normalized postings keyed by their external id.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from django.core.exceptions import ValidationError
from django.db import DataError, IntegrityError
from django.utils import timezone

from .models import JobPosting

logger = logging.getLogger(__name__)

# Per-record problems: the record is skipped, the batch goes on.
# Connection-level errors (OperationalError) are not caught here on purpose.
RECORD_ERRORS = (IntegrityError, DataError, ValidationError, ValueError, TypeError, AttributeError)

SCRAPED_FIELDS = ('title', 'company', 'location', 'country', 'description', 'source_url', 'posted_at')


@dataclass
class UpsertStats:
    created: int = 0
    updated: int = 0
    skipped: int = 0

    @property
    def saved(self) -> int:
        return self.created + self.updated


class PostingUpsertService:
    """Insert-or-update postings by ``external_id``."""

    def _defaults(self, summary) -> dict:
        external_id = (summary.external_id or '').strip()
        title = (summary.title or '').strip()
        if not external_id:
            raise ValueError("posting has no external_id")
        if not title:
            raise ValueError(f"posting {external_id} has no title")

        defaults = {name: getattr(summary, name) for name in SCRAPED_FIELDS}
        defaults['title'] = title
        # Clip to column sizes so the row fits on every backend
        for name in ('title', 'company', 'location', 'country'):
            max_length = JobPosting._meta.get_field(name).max_length
            defaults[name] = (defaults[name] or '')[:max_length]
        defaults.update({
            'origin': summary.origin,
            'strategy': summary.strategy,
            'status': JobPosting.STATUS_APPROVED,
            'last_seen_at': timezone.now(),
        })
        return defaults

    def upsert(self, summary):
        """
        Create the posting on first sighting, otherwise overwrite its scraped
        fields and reset it to approved. Returns ``(posting, created)``.

        ``update_or_create`` locks the row (or relies on the unique constraint
        for a concurrent insert), so two workers never produce two rows.
        """
        defaults = self._defaults(summary)
        return JobPosting.objects.update_or_create(
            external_id=summary.external_id.strip(),
            defaults=defaults,
        )

    def upsert_many(self, summaries: Iterable) -> UpsertStats:
        stats = UpsertStats()
        for summary in summaries:
            try:
                _, created = self.upsert(summary)
            except RECORD_ERRORS as exc:
                stats.skipped += 1
                logger.warning(
                    "Skipping posting %s: %s",
                    getattr(summary, 'external_id', '?'), exc,
                )
                continue
            if created:
                stats.created += 1
            else:
                stats.updated += 1
        logger.debug("Saved/Updated %d jobs (%d skipped)", stats.saved, stats.skipped)
        return stats


def save_postings(summaries) -> UpsertStats:
    return PostingUpsertService().upsert_many(summaries)
