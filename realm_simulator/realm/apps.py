from __future__ import annotations

from django.apps import AppConfig


class RealmConfig(AppConfig):
    """Configuration for the realm app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'realm'
    verbose_name = 'Realm simulation'
