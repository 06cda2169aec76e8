"""App configuration for the curriculum content app."""

from __future__ import annotations

from django.apps import AppConfig


class CurriculumConfig(AppConfig):
    """Configuration for the `curriculum` app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "curriculum"
    verbose_name = "Curriculum"
