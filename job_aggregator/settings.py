"""
Django settings for job_aggregator project.
"""

from pathlib import Path
import os

# Paths
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables from .env if present
try:
    from dotenv import load_dotenv  # type: ignore

    # Prefer project root .env, then fallback to package dir .env, then default search
    env_candidates = [BASE_DIR / ".env", BASE_DIR / "job_aggregator" / ".env"]
    loaded = False
    for env_path in env_candidates:
        if os.path.exists(env_path):
            load_dotenv(env_path)
            loaded = True
            break
    if not loaded:
        load_dotenv()
except ImportError:
    # Env can still come from the OS
    pass


def _env_list(name, default):
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name, default):
    return os.getenv(name, "1" if default else "0") in ["1", "true", "True"]


# Security
SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-change-me-in-production")
DEBUG = _env_bool("DEBUG", True)

ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h.strip()]
if DEBUG and "*" not in ALLOWED_HOSTS:
    ALLOWED_HOSTS.append("*")

# Apps
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    'django_celery_beat',

    # Project apps
    "apps.jobs",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "job_aggregator.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

ASGI_APPLICATION = "job_aggregator.asgi.application"

# Database (uses env from docker-compose; falls back to SQLite if missing)
if os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME"),
            "USER": os.getenv("DB_USER", "postgres"),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "localhost"),
            "PORT": os.getenv("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# Static files
STATIC_URL = "static/"
STATIC_ROOT = os.getenv("STATIC_ROOT", str(BASE_DIR / "staticfiles"))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Celery configuration
# Broker/result backend can be overridden via environment variables
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TIMEZONE = 'UTC'
CELERY_ENABLE_UTC = True
CELERY_TASK_ALWAYS_EAGER = False
CELERY_BEAT_SCHEDULER = 'django_celery_beat.schedulers:DatabaseScheduler'
"""
Celery connection resilience
- Celery 6.0+ changes the startup retry behavior. To retain the existing
  behavior (retry connecting to the broker during startup), enable the
  following setting. Max retries -1 means retry forever.
"""
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True
CELERY_BROKER_CONNECTION_MAX_RETRIES = -1

# Each scrape task drives headless browsers: keep the pool small and never
# let a worker reserve more than the task it is running.
CELERY_WORKER_CONCURRENCY = int(os.getenv('CELERY_WORKER_CONCURRENCY', '2'))
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ACKS_LATE = True
CELERY_TASK_REJECT_ON_WORKER_LOST = True
# Unacked tasks reappear after this many seconds if a worker dies mid-task.
# Must stay above the hard time limit below.
CELERY_BROKER_TRANSPORT_OPTIONS = {
    'visibility_timeout': int(os.getenv('CELERY_VISIBILITY_TIMEOUT', str(2 * 60 * 60))),
}

# Single-flight locks live in the cache; Redis makes cache.add() atomic across workers
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.getenv("CACHE_URL", CELERY_BROKER_URL),
    }
}


# Scraping pipeline
SCRAPE_TARGET_COUNTRIES = _env_list("SCRAPE_TARGET_COUNTRIES", [
    "United States",
    "United Kingdom",
    "Canada",
    "Germany",
    "Australia",
    "India",
    "Singapore",
])
SCRAPE_SEARCH_TERM = os.getenv("SCRAPE_SEARCH_TERM", "software engineer")
SCRAPE_INTERVAL_HOURS = int(os.getenv("SCRAPE_INTERVAL_HOURS", "6"))
SCRAPE_ATS_DOMAINS = _env_list("SCRAPE_ATS_DOMAINS", [
    "greenhouse.io",
    "lever.co",
    "ashbyhq.com",
    "workable.com",
    "breezy.hr",
])
SCRAPE_FEED_URLS = _env_list("SCRAPE_FEED_URLS", [
    "https://jobscollider.com/remote-software-development-jobs.rss",
    "https://weworkremotely.com/categories/remote-programming-jobs.rss",
    "https://stackoverflow.com/jobs/feed",
])
SCRAPE_MAX_ATTEMPTS = int(os.getenv("SCRAPE_MAX_ATTEMPTS", "3"))
SCRAPE_RETRY_BACKOFF_SECONDS = int(os.getenv("SCRAPE_RETRY_BACKOFF_SECONDS", "60"))
SCRAPE_RETRY_BACKOFF_MAX_SECONDS = int(os.getenv("SCRAPE_RETRY_BACKOFF_MAX_SECONDS", "1800"))
SCRAPE_DORK_DELAY_MIN = float(os.getenv("SCRAPE_DORK_DELAY_MIN", "3"))
SCRAPE_DORK_DELAY_MAX = float(os.getenv("SCRAPE_DORK_DELAY_MAX", "7"))
SCRAPE_DORK_RESULTS_PER_QUERY = int(os.getenv("SCRAPE_DORK_RESULTS_PER_QUERY", "20"))
SCRAPE_FEED_TIMEOUT = float(os.getenv("SCRAPE_FEED_TIMEOUT", "10"))
SCRAPE_CYCLE_TIMEOUT = int(os.getenv("SCRAPE_CYCLE_TIMEOUT", "1800"))
SCRAPE_BROWSER_HEADLESS = _env_bool("SCRAPE_BROWSER_HEADLESS", True)

CELERY_TASK_SOFT_TIME_LIMIT = SCRAPE_CYCLE_TIMEOUT
CELERY_TASK_TIME_LIMIT = SCRAPE_CYCLE_TIMEOUT + 60


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "scrapers": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "celery": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}
