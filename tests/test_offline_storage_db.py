"""Integration tests for the database-backed cache storage."""

from __future__ import annotations

import pytest

from offline.fetch import FetchResponse
from offline.models import CachedResponse
from offline.storage import DatabaseCacheStorage

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


def test_partitions_are_created_on_open_and_listed() -> None:
    storage = DatabaseCacheStorage()
    storage.open("pages")
    storage.open("frontend-master-v1")
    storage.open("pages")

    assert storage.keys() == ["frontend-master-v1", "pages"]


def test_put_match_and_overwrite() -> None:
    """Entries round-trip status, headers and body; a second put replaces the first."""

    cache = DatabaseCacheStorage().open("api-routes")
    url = "https://fsd.example/api/topics/"
    cache.put(url, FetchResponse(url=url, status=200, headers={"Content-Type": "application/json"}, body=b"[]"))
    cache.put(url, FetchResponse(url=url, status=200, headers={"Content-Type": "application/json"}, body=b"[1]"))

    cached = cache.match(url)

    assert cached == FetchResponse(url=url, status=200, headers={"Content-Type": "application/json"}, body=b"[1]")
    assert CachedResponse.objects.count() == 1
    assert cache.match("https://fsd.example/other/") is None


def test_same_url_is_isolated_per_partition() -> None:
    storage = DatabaseCacheStorage()
    url = "https://fsd.example/"
    storage.open("a").put(url, FetchResponse(url=url, status=200, body=b"a"))

    assert storage.open("b").match(url) is None


def test_delete_entry_and_partition() -> None:
    storage = DatabaseCacheStorage()
    cache = storage.open("static-js")
    cache.put("https://fsd.example/static/a.js", FetchResponse(url="x", status=200))
    cache.put("https://fsd.example/static/b.js", FetchResponse(url="y", status=200))

    assert cache.delete("https://fsd.example/static/a.js") is True
    assert cache.delete("https://fsd.example/static/a.js") is False
    assert cache.keys() == ["https://fsd.example/static/b.js"]

    assert storage.delete("static-js") is True
    assert storage.delete("static-js") is False
    assert CachedResponse.objects.count() == 0
