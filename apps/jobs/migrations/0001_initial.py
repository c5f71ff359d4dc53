from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='JobPosting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('external_id', models.CharField(max_length=200, unique=True)),
                ('title', models.CharField(max_length=300)),
                ('company', models.CharField(default='Unknown', max_length=200)),
                ('location', models.CharField(blank=True, max_length=200)),
                ('country', models.CharField(db_index=True, max_length=100)),
                ('description', models.TextField(blank=True)),
                ('source_url', models.URLField(blank=True, help_text='Original posting or search URL', max_length=2000)),
                ('origin', models.CharField(choices=[('scraper', 'Scraper')], default='scraper', max_length=20)),
                ('strategy', models.CharField(blank=True, choices=[('ats', 'ATS Dorking'), ('google_jobs', 'Search Jobs Widget'), ('rss', 'Aggregator Feed')], max_length=20)),
                ('status', models.CharField(choices=[('approved', 'Approved'), ('pending', 'Pending'), ('rejected', 'Rejected')], default='approved', max_length=20)),
                ('posted_at', models.DateTimeField(blank=True, null=True)),
                ('scraped_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('last_seen_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Last scrape that returned this posting')),
            ],
            options={
                'verbose_name': 'Job Posting',
                'verbose_name_plural': 'Job Postings',
                'ordering': ['-scraped_at'],
                'indexes': [
                    models.Index(fields=['country', 'status'], name='jobs_country_status_idx'),
                    models.Index(fields=['strategy', 'last_seen_at'], name='jobs_strategy_seen_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ScrapeRun',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('country', models.CharField(db_index=True, max_length=100)),
                ('search_term', models.CharField(max_length=200)),
                ('task_id', models.CharField(blank=True, db_index=True, max_length=255)),
                ('attempt', models.PositiveSmallIntegerField(default=1)),
                ('status', models.CharField(choices=[('running', 'Running'), ('succeeded', 'Succeeded'), ('failed', 'Failed (will retry)'), ('abandoned', 'Abandoned'), ('skipped', 'Skipped')], default='running', max_length=20)),
                ('postings_found', models.PositiveIntegerField(default=0)),
                ('postings_saved', models.PositiveIntegerField(default=0)),
                ('error', models.TextField(blank=True)),
                ('summary', models.JSONField(blank=True, default=dict)),
                ('started_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('finished_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Scrape Run',
                'verbose_name_plural': 'Scrape Runs',
                'ordering': ['-started_at'],
            },
        ),
    ]
