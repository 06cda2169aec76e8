"""Cache storage backends: named partitions of URL -> response.

Both backends expose the same interface as the browser Cache Storage API:
`open(name)` returns a partition (created on first open), `keys()` lists
partition names and `delete(name)` drops a partition with its entries.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from django.db import transaction

from offline.fetch import Fetcher, FetchRequest, FetchResponse, NetworkError
from offline.models import CachedResponse, CachePartition

logger = logging.getLogger(__name__)


class Cache(Protocol):
    """One cache partition."""

    name: str

    def match(self, url: str) -> FetchResponse | None: ...

    def put(self, url: str, response: FetchResponse) -> None: ...

    def delete(self, url: str) -> bool: ...

    def keys(self) -> list[str]: ...


class CacheStorage(Protocol):
    """A set of named cache partitions."""

    def open(self, name: str) -> Cache: ...

    def keys(self) -> list[str]: ...

    def delete(self, name: str) -> bool: ...


def fetch_all(urls: Iterable[str], fetcher: Fetcher) -> list[FetchResponse]:
    """Fetch every URL, failing as a whole when any response is not ok.

    Raises:
        NetworkError: On the first transport failure or non-2xx response.
    """

    responses: list[FetchResponse] = []
    for url in urls:
        response = fetcher(FetchRequest(url=url))
        if not response.ok:
            raise NetworkError(f"Request for {url} returned status {response.status}")
        responses.append(response)
    return responses


def add_all(cache: Cache, urls: Iterable[str], fetcher: Fetcher) -> list[str]:
    """Fetch `urls` and store them all, or store nothing when any fetch fails.

    Returns:
        The stored URLs.
    """

    urls = list(urls)
    responses = fetch_all(urls, fetcher)
    for url, response in zip(urls, responses):
        cache.put(url, response)
    return urls


class MemoryCache:
    """In-memory partition; shares its parent's lock."""

    def __init__(self, name: str, entries: dict[str, FetchResponse], lock: threading.Lock) -> None:
        self.name = name
        self._entries = entries
        self._lock = lock

    def match(self, url: str) -> FetchResponse | None:
        with self._lock:
            return self._entries.get(url)

    def put(self, url: str, response: FetchResponse) -> None:
        with self._lock:
            self._entries[url] = response

    def delete(self, url: str) -> bool:
        with self._lock:
            return self._entries.pop(url, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)


class MemoryCacheStorage:
    """Thread-safe in-memory cache storage."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._partitions: dict[str, dict[str, FetchResponse]] = {}

    def open(self, name: str) -> MemoryCache:
        with self._lock:
            entries = self._partitions.setdefault(name, {})
        return MemoryCache(name, entries, self._lock)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._partitions)

    def delete(self, name: str) -> bool:
        with self._lock:
            return self._partitions.pop(name, None) is not None


class DatabaseCache:
    """A partition stored as `CachedResponse` rows."""

    def __init__(self, partition: CachePartition) -> None:
        self.name = partition.name
        self._partition = partition

    def match(self, url: str) -> FetchResponse | None:
        row = CachedResponse.objects.filter(partition=self._partition, url=url).first()
        if row is None:
            return None
        return FetchResponse(url=row.url, status=row.status, headers=dict(row.headers or {}), body=bytes(row.body))

    def put(self, url: str, response: FetchResponse) -> None:
        CachedResponse.objects.update_or_create(
            partition=self._partition,
            url=url,
            defaults={"status": response.status, "headers": dict(response.headers), "body": response.body},
        )

    def delete(self, url: str) -> bool:
        deleted, _ = CachedResponse.objects.filter(partition=self._partition, url=url).delete()
        return deleted > 0

    def keys(self) -> list[str]:
        return list(
            CachedResponse.objects.filter(partition=self._partition).order_by("url").values_list("url", flat=True)
        )


class DatabaseCacheStorage:
    """Cache storage persisted through the Django ORM."""

    def open(self, name: str) -> DatabaseCache:
        partition, _ = CachePartition.objects.get_or_create(name=name)
        return DatabaseCache(partition)

    def keys(self) -> list[str]:
        return list(CachePartition.objects.order_by("name").values_list("name", flat=True))

    def delete(self, name: str) -> bool:
        with transaction.atomic():
            deleted, _ = CachePartition.objects.filter(name=name).delete()
        return deleted > 0
