"""Template context processors for the Frontend System Design site."""

from __future__ import annotations

from django.conf import settings
from django.http import HttpRequest
from django.urls import reverse


def site_navigation(request: HttpRequest) -> dict[str, object]:
    """Expose site name and primary navigation links to all templates.

    Args:
        request: Current request object.

    Returns:
        Context dict with `site_name` and `nav_links` (label, url, active).
    """

    links = (
        ("Home", reverse("core:home")),
        ("Topics", reverse("core:topics")),
        ("Resources", reverse("core:resources")),
    )
    path = request.path
    nav_links = [
        {"label": label, "url": url, "active": path == url if url == "/" else path.startswith(url)}
        for label, url in links
    ]
    return {"site_name": settings.SITE_NAME, "nav_links": nav_links}
