"""Minimal smoke tests for project wiring."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.unit


def test_rendering_entry_points_import() -> None:
    """Import the renderer and offline worker and verify the public entry points exist."""

    from core.richtext import render_rich_text
    from offline.worker import OfflineWorker

    assert callable(render_rich_text)
    assert callable(OfflineWorker)


def test_django_project_loads() -> None:
    """Import and initialize Django to verify settings are valid."""

    import os

    import django
    from django.conf import settings

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "frontendSystemDesign.settings")
    django.setup()
    assert "curriculum.apps.CurriculumConfig" in settings.INSTALLED_APPS
    assert "offline.apps.OfflineConfig" in settings.INSTALLED_APPS
    assert "core.apps.CoreConfig" in settings.INSTALLED_APPS
