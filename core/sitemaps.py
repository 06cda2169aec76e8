"""Sitemap sections served at `/sitemap.xml`."""

from __future__ import annotations

from django.contrib.sitemaps import Sitemap
from django.urls import reverse

from curriculum.models import Topic


class StaticViewSitemap(Sitemap):
    """Home page and topic index, with per-URL priority."""

    changefreq = "weekly"
    _priorities = {"core:home": 1.0, "core:topics": 0.9}

    def items(self) -> list[str]:
        return list(self._priorities)

    def location(self, item: str) -> str:
        return reverse(item)

    def priority(self, item: str) -> float:
        return self._priorities[item]


class TopicSitemap(Sitemap):
    """One entry per topic, last modified at the topic's `updated_at`."""

    changefreq = "monthly"
    priority = 0.8

    def items(self):
        return Topic.objects.order_by("order")

    def lastmod(self, obj: Topic):
        return obj.updated_at


SITEMAPS = {"static": StaticViewSitemap, "topics": TopicSitemap}
