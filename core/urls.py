"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("", views.home, name="home"),
    path("topics/", views.topics_index, name="topics"),
    path("topics/<slug:slug>/", views.topic_detail, name="topic_detail"),
    path("resources/", views.resources_index, name="resources"),
    path("resources/<int:number>/", views.resource_detail, name="resource_detail"),
    path("api/topics/", views.topics_api, name="topics_api"),
    # Must stay last: any other path is looked up as a published Page.
    path("<path:path>/", views.page, name="page"),
]
