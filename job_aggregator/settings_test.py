# settings_test.py
from .settings import *  # keep base defaults, then override below

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'job-aggregator-tests',
    }
}

# Run tasks in-process; retries are replayed synchronously by Celery
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False

SCRAPE_TARGET_COUNTRIES = ['United States', 'Germany', 'India']
SCRAPE_DORK_DELAY_MIN = 0
SCRAPE_DORK_DELAY_MAX = 0
SCRAPE_RETRY_BACKOFF_SECONDS = 1
SCRAPE_MAX_ATTEMPTS = 3

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
