"""Django settings for the realm_simulator project.

Only the pieces needed to persist the world and run the scheduled jobs are
configured here: the ORM, the ``realm`` app, logging and the scheduler
knobs.  There is no web surface; callers drive the simulation through the
service layer, management commands and Celery tasks.  By default we use
SQLite for ease of setup.
"""
from __future__ import annotations

import os
from pathlib import Path

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-to-a-unique-string")


# Application definition
INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'realm',
]


# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv("REALM_DB_PATH", str(BASE_DIR / 'db.sqlite3')),
    }
}


# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = False

USE_TZ = True


# Default primary key field type
# https://docs.djangoproject.com/en/4.2/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Logging

REALM_LOG_LEVEL = os.getenv("REALM_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "realm": {"handlers": ["console"], "level": REALM_LOG_LEVEL, "propagate": False},
    },
}


# Simulation scheduling
ENABLE_AUTO_TICKS = os.getenv('ENABLE_AUTO_TICKS', '1').lower() not in {'0', 'false', 'off'}
SIM_TICK_INTERVAL_SECONDS = int(os.getenv('SIM_TICK_INTERVAL_SECONDS', '120'))
SIM_TICK_JITTER_SECONDS = int(os.getenv('SIM_TICK_JITTER_SECONDS', '0'))
SIM_TICK_STARTUP_DELAY_SECONDS = int(os.getenv('SIM_TICK_STARTUP_DELAY_SECONDS', '5'))
SIM_AP_REFRESH_INTERVAL_SECONDS = int(os.getenv('SIM_AP_REFRESH_INTERVAL_SECONDS', '3600'))


# Celery
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_TASK_ROUTES = {
    "realm.tasks.run_scheduled_tick": {"queue": "ticks"},
    "realm.tasks.refresh_action_points": {"queue": "ticks"},
}
