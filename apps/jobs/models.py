"""
Job models for the job aggregator application.
"""

from django.db import models
from django.utils import timezone


class JobPosting(models.Model):
    """A scraped posting, keyed by the stable identifier its strategy derives."""

    STATUS_APPROVED = 'approved'
    STATUS_CHOICES = [
        ('approved', 'Approved'),
        ('pending', 'Pending'),
        ('rejected', 'Rejected'),
    ]

    ORIGIN_CHOICES = [
        ('scraper', 'Scraper'),
    ]

    STRATEGY_CHOICES = [
        ('ats', 'ATS Dorking'),
        ('google_jobs', 'Search Jobs Widget'),
        ('rss', 'Aggregator Feed'),
    ]

    # Upsert key: ats_<domain>_<hash>, gjobs_<hash> or rss_<hash>
    external_id = models.CharField(max_length=200, unique=True)

    # Basic Information
    title = models.CharField(max_length=300)
    company = models.CharField(max_length=200, default='Unknown')
    location = models.CharField(max_length=200, blank=True)
    country = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    source_url = models.URLField(max_length=2000, blank=True, help_text="Original posting or search URL")

    # Metadata
    origin = models.CharField(max_length=20, choices=ORIGIN_CHOICES, default='scraper')
    strategy = models.CharField(max_length=20, choices=STRATEGY_CHOICES, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_APPROVED)
    posted_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    scraped_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_seen_at = models.DateTimeField(default=timezone.now, help_text="Last scrape that returned this posting")

    class Meta:
        ordering = ['-scraped_at']
        verbose_name = 'Job Posting'
        verbose_name_plural = 'Job Postings'
        indexes = [
            models.Index(fields=['country', 'status'], name='jobs_country_status_idx'),
            models.Index(fields=['strategy', 'last_seen_at'], name='jobs_strategy_seen_idx'),
        ]

    def __str__(self):
        return f"{self.title} at {self.company}"


class ScrapeRun(models.Model):
    """One delivery attempt of a country scrape task."""

    STATUS_RUNNING = 'running'
    STATUS_SUCCEEDED = 'succeeded'
    STATUS_FAILED = 'failed'
    STATUS_ABANDONED = 'abandoned'
    STATUS_SKIPPED = 'skipped'
    STATUS_CHOICES = [
        (STATUS_RUNNING, 'Running'),
        (STATUS_SUCCEEDED, 'Succeeded'),
        (STATUS_FAILED, 'Failed (will retry)'),
        (STATUS_ABANDONED, 'Abandoned'),
        (STATUS_SKIPPED, 'Skipped'),
    ]

    country = models.CharField(max_length=100, db_index=True)
    search_term = models.CharField(max_length=200)
    task_id = models.CharField(max_length=255, blank=True, db_index=True)
    attempt = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_RUNNING)
    postings_found = models.PositiveIntegerField(default=0)
    postings_saved = models.PositiveIntegerField(default=0)
    error = models.TextField(blank=True)
    summary = models.JSONField(default=dict, blank=True)
    started_at = models.DateTimeField(default=timezone.now)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-started_at']
        verbose_name = 'Scrape Run'
        verbose_name_plural = 'Scrape Runs'

    def __str__(self):
        return f"{self.country} attempt {self.attempt} ({self.status})"

    def finish(self, status, error='', result=None):
        self.status = status
        self.error = error
        self.finished_at = timezone.now()
        update_fields = ['status', 'error', 'finished_at']
        if result is not None:
            self.postings_found = result.found
            self.postings_saved = result.saved
            self.summary = result.as_dict()
            update_fields += ['postings_found', 'postings_saved', 'summary']
        self.save(update_fields=update_fields)
