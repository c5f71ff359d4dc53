"""
Admin configuration for job models.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import JobPosting, ScrapeRun


@admin.register(JobPosting)
class JobPostingAdmin(admin.ModelAdmin):
    """Admin configuration for JobPosting model."""
    list_display = [
        'id',
        'title',
        'company',
        'country',
        'strategy',
        'status',
        'posted_at',
        'last_seen_at',
    ]

    list_filter = [
        'status',
        'strategy',
        'country',
        'scraped_at',
    ]

    search_fields = [
        'title',
        'company',
        'description',
        'external_id',
    ]

    readonly_fields = ['external_id', 'scraped_at', 'updated_at', 'last_seen_at', 'source_url_link']

    date_hierarchy = 'scraped_at'
    ordering = ['-scraped_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'company', 'description')
        }),
        ('Location', {
            'fields': ('location', 'country')
        }),
        ('External Source', {
            'fields': ('external_id', 'source_url_link', 'origin', 'strategy')
        }),
        ('Metadata', {
            'fields': ('status', 'posted_at'),
        }),
        ('Timestamps', {
            'fields': ('scraped_at', 'updated_at', 'last_seen_at'),
            'classes': ('collapse',)
        }),
    )

    def source_url_link(self, obj):
        """Display clickable source URL."""
        if obj.source_url:
            return format_html(
                '<a href="{}" target="_blank" rel="noopener">{}</a>',
                obj.source_url,
                obj.source_url
            )
        return 'No URL'

    source_url_link.short_description = 'Source URL'

    # Custom actions
    actions = ['mark_as_approved', 'mark_as_rejected']

    def mark_as_approved(self, request, queryset):
        """Mark selected jobs as approved."""
        count = queryset.update(status='approved')
        self.message_user(request, f'{count} jobs marked as approved.')

    mark_as_approved.short_description = 'Mark selected jobs as approved'

    def mark_as_rejected(self, request, queryset):
        """Mark selected jobs as rejected (the next scrape that sees them approves them again)."""
        count = queryset.update(status='rejected')
        self.message_user(request, f'{count} jobs marked as rejected.')

    mark_as_rejected.short_description = 'Mark selected jobs as rejected'


# Customize admin site headers
admin.site.site_header = "Job Aggregator Admin"
admin.site.site_title = "Job Aggregator"
admin.site.index_title = "Welcome to Job Aggregator Administration"


@admin.register(ScrapeRun)
class ScrapeRunAdmin(admin.ModelAdmin):
    list_display = ['id', 'country', 'attempt', 'status', 'postings_found', 'postings_saved', 'started_at', 'finished_at']
    list_filter = ['status', 'country', 'started_at']
    search_fields = ['country', 'task_id', 'error']
    readonly_fields = ['started_at', 'finished_at', 'summary']

    actions = ['requeue_countries']

    def requeue_countries(self, request, queryset):
        """Queue a fresh scrape for each distinct country in the selection."""
        from .scheduling import trigger_global_scrape

        countries = sorted(set(queryset.values_list('country', flat=True)))
        outcome = trigger_global_scrape(countries=countries)
        self.message_user(
            request,
            f"Queued {len(outcome['queued'])} countries; {len(outcome['failed'])} failed to enqueue.",
        )

    requeue_countries.short_description = 'Re-queue scrape for selected countries'
