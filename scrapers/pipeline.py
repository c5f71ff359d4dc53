"""
One country scrape cycle: the strategies in a fixed order, each behind its own
error boundary, with results persisted as soon as a strategy returns.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, Optional, Sequence

from .config import ScrapeSettings
from .dork import scrape_ats_jobs
from .exceptions import TASK_FATAL_ERRORS, ScrapeCycleError
from .feeds import scrape_aggregator_feeds
from .heuristics import PostingSummary
from .widget import scrape_google_jobs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    name: str
    run: Callable[[str, str, ScrapeSettings], list]


# Sequential on purpose: at most one browser per task at any moment.
DEFAULT_STRATEGIES = (
    Strategy('ats', scrape_ats_jobs),
    Strategy('google_jobs', scrape_google_jobs),
    Strategy('rss', scrape_aggregator_feeds),
)


@dataclass
class StrategyOutcome:
    name: str
    found: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    error: Optional[str] = None


@dataclass
class CycleResult:
    country: str
    search_term: str
    outcomes: list = field(default_factory=list)

    @property
    def found(self) -> int:
        return sum(o.found for o in self.outcomes)

    @property
    def saved(self) -> int:
        return sum(o.created + o.updated for o in self.outcomes)

    @property
    def failed_strategies(self) -> list:
        return [o.name for o in self.outcomes if o.error]

    def as_dict(self) -> dict:
        return {
            'country': self.country,
            'search_term': self.search_term,
            'found': self.found,
            'saved': self.saved,
            'strategies': [asdict(o) for o in self.outcomes],
        }


def run_scrape_cycle(
    country: str,
    search_term: str,
    settings: ScrapeSettings,
    save: Callable[[Sequence[PostingSummary]], object],
    strategies: Optional[Sequence[Strategy]] = None,
) -> CycleResult:
    """
    Run every strategy for ``country`` and hand each batch to ``save``.

    ``save`` receives the strategy's postings and returns an object with
    ``created``/``updated``/``skipped`` counts. A strategy that raises is
    logged and the next one still runs; only when all of them failed does the
    cycle raise :class:`ScrapeCycleError`.
    """
    if strategies is None:
        strategies = DEFAULT_STRATEGIES
    result = CycleResult(country=country, search_term=search_term)
    logger.info("Scraping jobs for %s (%r)", country, search_term)

    for strategy in strategies:
        outcome = StrategyOutcome(name=strategy.name)
        try:
            jobs = strategy.run(country, search_term, settings)
            outcome.found = len(jobs)
            if jobs:
                stats = save(jobs)
                outcome.created = stats.created
                outcome.updated = stats.updated
                outcome.skipped = stats.skipped
        except TASK_FATAL_ERRORS:
            raise
        except Exception as exc:
            logger.exception("[%s] Strategy failed for %s", strategy.name, country)
            outcome.error = f"{type(exc).__name__}: {exc}"
        result.outcomes.append(outcome)

    if result.outcomes and len(result.failed_strategies) == len(result.outcomes):
        raise ScrapeCycleError(country, {o.name: o.error for o in result.outcomes})

    logger.info(
        "Cycle for %s done: found=%d saved=%d failed_strategies=%s",
        country, result.found, result.saved, result.failed_strategies or '-',
    )
    return result
