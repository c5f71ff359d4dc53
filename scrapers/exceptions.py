"""Errors raised by the scraping pipeline."""

from celery.exceptions import SoftTimeLimitExceeded
from django.db import InterfaceError, OperationalError


class ScrapeError(Exception):
    """Base class for scraping failures."""


class FeedError(ScrapeError):
    """A syndication feed could not be fetched or parsed."""


class ScrapeCycleError(ScrapeError):
    """Every strategy of a country cycle failed; the task should be retried."""

    def __init__(self, country, errors):
        self.country = country
        self.errors = dict(errors)
        detail = "; ".join(f"{name}: {err}" for name, err in self.errors.items())
        super().__init__(f"all strategies failed for {country}: {detail}")


# Error boundaries inside strategies and the pipeline must let these through:
# they mean the whole task has to fail (cycle timeout, store unreachable).
TASK_FATAL_ERRORS = (SoftTimeLimitExceeded, OperationalError, InterfaceError)
