"""Offline worker: install, activate, fetch routing and client messages.

`OfflineWorker` mirrors the browser service worker lifecycle so the same
caching behavior can be exercised from management commands and tests:

- `install()` pre-caches the app shell into the versioned main partition.
- `activate()` drops partitions left behind by older versions.
- `handle()` routes a request through the route table and runs the strategy.
- `message()` handles `CACHE_URLS` and `SKIP_WAITING` client messages.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from urllib.parse import urljoin

from django.conf import settings
from django.db import connections

from offline import strategies
from offline.fetch import Fetcher, FetchRequest, FetchResponse
from offline.routes import (
    CACHE_FIRST,
    NETWORK_FIRST,
    STALE_WHILE_REVALIDATE,
    CacheRoute,
    RouteMatch,
    default_routes,
    select_route,
)
from offline.storage import CacheStorage, add_all

logger = logging.getLogger(__name__)

MESSAGE_CACHE_URLS = "CACHE_URLS"
MESSAGE_SKIP_WAITING = "SKIP_WAITING"


@dataclass(frozen=True, slots=True)
class WorkerConfig:
    """Versioning and pre-cache settings for the worker.

    Attributes:
        origin: Site origin, e.g. `https://example.com`; relative URLs are
            resolved against it.
        prefix: Name prefix shared by every version of the main partition.
        version: Current version; the main partition is `<prefix>-<version>`.
        offline_url: Path of the offline document served to failed navigations.
        precache_urls: Paths pre-cached on install.
    """

    origin: str
    prefix: str = "frontend-master"
    version: str = "v1"
    offline_url: str = "/offline/"
    precache_urls: tuple[str, ...] = field(default=("/", "/offline/", "/manifest.webmanifest"))

    @property
    def cache_name(self) -> str:
        return f"{self.prefix}-{self.version}"

    def absolute(self, url: str) -> str:
        """Resolve `url` against the site origin."""

        return urljoin(self.origin.rstrip("/") + "/", url)

    @classmethod
    def from_settings(cls, origin: str | None = None) -> "WorkerConfig":
        """Build a config from the `OFFLINE_*` settings."""

        return cls(
            origin=(origin or settings.SITE_URL).rstrip("/"),
            prefix=settings.OFFLINE_CACHE_PREFIX,
            version=settings.OFFLINE_CACHE_VERSION,
            offline_url=settings.OFFLINE_URL,
            precache_urls=tuple(settings.OFFLINE_PRECACHE_URLS),
        )


class OfflineWorker:
    """Python implementation of the site's caching service worker."""

    def __init__(
        self,
        *,
        config: WorkerConfig,
        storage: CacheStorage,
        fetcher: Fetcher,
        routes: Sequence[CacheRoute] | None = None,
        max_background: int = 4,
    ) -> None:
        self.config = config
        self.storage = storage
        self.fetcher = fetcher
        self.routes = tuple(routes) if routes is not None else default_routes(settings.STATIC_URL)
        self.skip_waiting = False
        self._executor = ThreadPoolExecutor(max_workers=max_background, thread_name_prefix="offline-revalidate")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def install(self) -> list[str]:
        """Pre-cache the configured URLs into the main partition.

        Returns:
            The absolute URLs stored.

        Raises:
            NetworkError: When any pre-cache URL cannot be fetched; nothing is
                stored in that case.
        """

        urls = [self.config.absolute(url) for url in self.config.precache_urls]
        cache = self.storage.open(self.config.cache_name)
        stored = add_all(cache, urls, self.fetcher)
        logger.info("Pre-cached %d URL(s) into %s", len(stored), self.config.cache_name)
        return stored

    def activate(self) -> list[str]:
        """Delete main partitions from previous versions.

        Returns:
            Names of the deleted partitions.
        """

        deleted: list[str] = []
        prefix = f"{self.config.prefix}-"
        for name in self.storage.keys():
            if name.startswith(prefix) and name != self.config.cache_name:
                logger.info("Deleting old cache %s", name)
                self.storage.delete(name)
                deleted.append(name)
        return deleted

    def route_for(self, request: FetchRequest) -> RouteMatch | None:
        """Return the strategy/partition that would answer `request`."""

        return select_route(
            request,
            self.routes,
            origin=self.config.origin,
            main_cache=self.config.cache_name,
        )

    def handle(self, request: FetchRequest, preload: FetchResponse | None = None) -> FetchResponse | None:
        """Serve a request the way the service worker's fetch handler does.

        Args:
            request: Request to serve.
            preload: Navigation preload response, when the browser supplied one.

        Returns:
            The response; None for requests the worker does not handle
            (non-GET, non-http) or when a stale-while-revalidate fetch with
            no cached entry failed.

        Raises:
            NetworkError: When the strategy has no fallback left.
        """

        match = self.route_for(request)
        if match is None:
            return None

        if preload is not None and request.is_navigation and preload.ok:
            self.storage.open(self.config.cache_name).put(request.url, preload)
            return preload

        if match.strategy == CACHE_FIRST:
            return strategies.cache_first(request, self.storage.open(match.cache_name), self.fetcher)
        if match.strategy == NETWORK_FIRST:
            return strategies.network_first(
                request,
                self.storage.open(match.cache_name),
                self.fetcher,
                offline_fallback=self._offline_document,
            )
        if match.strategy == STALE_WHILE_REVALIDATE:
            return strategies.stale_while_revalidate(
                request,
                self.storage.open(match.cache_name),
                self.fetcher,
                submit=self._submit,
            )
        return strategies.network_only(request, self.fetcher)

    def message(self, data: Mapping[str, object]) -> list[str]:
        """Handle a client message.

        Args:
            data: `{"type": "CACHE_URLS", "payload": [urls]}` or
                `{"type": "SKIP_WAITING"}`.

        Returns:
            URLs cached by `CACHE_URLS`; [] for other messages.
        """

        message_type = data.get("type")
        if message_type == MESSAGE_SKIP_WAITING:
            self.skip_waiting = True
            return []
        if message_type == MESSAGE_CACHE_URLS:
            payload = data.get("payload") or []
            if not isinstance(payload, list) or not all(isinstance(url, str) for url in payload):
                raise ValueError("CACHE_URLS payload must be a list of URL strings")
            urls = [self.config.absolute(url) for url in payload]
            return add_all(self.storage.open(self.config.cache_name), urls, self.fetcher)
        logger.debug("Ignoring unknown worker message type=%r", message_type)
        return []

    def wait(self, timeout: float | None = None) -> None:
        """Block until pending background revalidations finish."""

        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def close(self) -> None:
        """Wait for background work and shut the executor down."""

        self.wait()
        self._executor.shutdown(wait=True)

    def _offline_document(self) -> FetchResponse | None:
        cache = self.storage.open(self.config.cache_name)
        return cache.match(self.config.absolute(self.config.offline_url))

    def _submit(self, task: Callable[[], FetchResponse | None]) -> Future:
        def run() -> FetchResponse | None:
            try:
                return task()
            finally:
                # Pool threads hold their own DB connections.
                connections.close_all()

        future = self._executor.submit(run)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._finished)
        return future

    def _finished(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Background revalidation failed: %s", exc, exc_info=exc)
