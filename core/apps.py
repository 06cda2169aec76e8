"""App configuration for the public site app."""

from __future__ import annotations

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the `core` app (views, templates and renderers)."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Site"
