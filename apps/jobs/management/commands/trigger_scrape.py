import json

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.jobs.scheduling import trigger_global_scrape
from apps.jobs.services import save_postings
from scrapers.config import ScrapeSettings
from scrapers.exceptions import ScrapeCycleError
from scrapers.pipeline import run_scrape_cycle


class Command(BaseCommand):
    help = "Queue a scrape for every target country (or the given ones), or run a cycle inline with --sync"

    def add_arguments(self, parser):
        parser.add_argument(
            '--country',
            action='append',
            dest='countries',
            help='Country to scrape; repeat for several. Defaults to SCRAPE_TARGET_COUNTRIES',
        )
        parser.add_argument(
            '--search-term', default=None, help='Search term (default: SCRAPE_SEARCH_TERM)'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Run the cycle in this process instead of queueing it (no retries, no lock)',
        )

    def handle(self, *args, **options):
        countries = options['countries'] or list(settings.SCRAPE_TARGET_COUNTRIES)
        search_term = options['search_term'] or settings.SCRAPE_SEARCH_TERM

        if not options['sync']:
            outcome = trigger_global_scrape(countries=countries, search_term=search_term)
            self.stdout.write(self.style.SUCCESS(
                f"Queued {len(outcome['queued'])} of {len(countries)} countries for {search_term!r}"
            ))
            for country, error in outcome['failed'].items():
                self.stderr.write(self.style.ERROR(f"Could not queue {country}: {error}"))
            return

        scrape_settings = ScrapeSettings.from_django(search_term=search_term)
        for country in countries:
            try:
                result = run_scrape_cycle(country, search_term, scrape_settings, save=save_postings)
            except ScrapeCycleError as exc:
                self.stderr.write(self.style.ERROR(str(exc)))
                continue
            self.stdout.write(json.dumps(result.as_dict(), indent=2))
