"""App configuration for the offline Django app."""

from __future__ import annotations

from django.apps import AppConfig


class OfflineConfig(AppConfig):
    """Configuration for the `offline` app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "offline"
