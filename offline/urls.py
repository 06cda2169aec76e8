"""URL configuration for offline support."""

from __future__ import annotations

from django.urls import path

from offline import views

app_name = "offline"

urlpatterns = [
    path("service-worker.js", views.service_worker, name="service_worker"),
    path("manifest.webmanifest", views.manifest, name="manifest"),
    path("offline/", views.offline_page, name="offline"),
]
