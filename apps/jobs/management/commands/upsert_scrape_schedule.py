from django.core.management.base import BaseCommand, CommandError
from django.conf import settings

from apps.jobs.scheduling import PERIODIC_TASK_NAME, ensure_scrape_schedule


class Command(BaseCommand):
    help = "Upsert the django-celery-beat entry that triggers the global job scrape"

    def add_arguments(self, parser):
        parser.add_argument(
            '--interval-hours',
            type=int,
            default=None,
            help=f"Hours between global scrapes (default: SCRAPE_INTERVAL_HOURS={settings.SCRAPE_INTERVAL_HOURS})",
        )
        parser.add_argument(
            '--disable', action='store_true', help='Keep the entry but stop beat from firing it'
        )

    def handle(self, *args, **options):
        try:
            task = ensure_scrape_schedule(
                interval_hours=options['interval_hours'],
                enabled=not options['disable'],
            )
        except ValueError as exc:
            raise CommandError(str(exc))

        self.stdout.write(self.style.SUCCESS(
            f"Schedule upserted. name={PERIODIC_TASK_NAME} every={task.interval.every} "
            f"{task.interval.period} enabled={task.enabled}"
        ))
