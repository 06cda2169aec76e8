"""Views for the service worker script, web app manifest and offline page."""

from __future__ import annotations

import json

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.templatetags.static import static
from django.views.decorators.http import require_GET

from offline.routes import CACHE_FIRST, NETWORK_FIRST, STALE_WHILE_REVALIDATE, default_routes, routes_as_js

MANIFEST_CACHE_CONTROL = "public, max-age=3600"


@require_GET
def service_worker(request: HttpRequest) -> HttpResponse:
    """Render the service worker script from the Python route table."""

    response = render(
        request,
        "offline/service-worker.js",
        {
            "cache_prefix": settings.OFFLINE_CACHE_PREFIX,
            "cache_version": settings.OFFLINE_CACHE_VERSION,
            "offline_url": settings.OFFLINE_URL,
            "precache_json": json.dumps(list(settings.OFFLINE_PRECACHE_URLS)),
            "routes": routes_as_js(default_routes(settings.STATIC_URL)),
            "strategies": {
                "cache_first": CACHE_FIRST,
                "network_first": NETWORK_FIRST,
                "stale_while_revalidate": STALE_WHILE_REVALIDATE,
            },
        },
        content_type="application/javascript; charset=utf-8",
    )
    response["Service-Worker-Allowed"] = "/"
    response["Cache-Control"] = "no-cache"
    return response


@require_GET
def manifest(request: HttpRequest) -> JsonResponse:
    """Return the web app manifest."""

    icon = static("core/icon.svg")
    payload = {
        "name": f"{settings.SITE_NAME} Learning",
        "short_name": "Frontend Design",
        "description": "Learn Frontend System Design through structured theory and interactive 2D examples",
        "start_url": "/",
        "display": "standalone",
        "background_color": "#ffffff",
        "theme_color": "#0f172a",
        "icons": [
            {"src": icon, "sizes": "any", "type": "image/svg+xml", "purpose": "any"},
        ],
    }
    response = JsonResponse(payload, content_type="application/manifest+json")
    response["Cache-Control"] = MANIFEST_CACHE_CONTROL
    return response


def offline_page(request: HttpRequest) -> HttpResponse:
    """Render the static document served to failed navigations."""

    return render(request, "offline/offline.html")
