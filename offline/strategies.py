"""Caching strategies executed against one cache partition.

Each strategy takes the request, the partition and a fetcher. Only ok (2xx)
responses are ever stored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future

from offline.fetch import Fetcher, FetchRequest, FetchResponse, NetworkError
from offline.storage import Cache

logger = logging.getLogger(__name__)

Submit = Callable[[Callable[[], FetchResponse | None]], "Future[FetchResponse | None]"]


def network_only(request: FetchRequest, fetcher: Fetcher) -> FetchResponse:
    """Fetch without touching any cache."""

    return fetcher(request)


def cache_first(request: FetchRequest, cache: Cache, fetcher: Fetcher) -> FetchResponse:
    """Serve from cache; on a miss fetch and store ok responses.

    Raises:
        NetworkError: When the entry is not cached and the fetch fails.
    """

    cached = cache.match(request.url)
    if cached is not None:
        return cached
    try:
        response = fetcher(request)
    except NetworkError:
        logger.error("Cache-first fetch failed url=%s cache=%s", request.url, cache.name)
        raise
    if response.ok:
        cache.put(request.url, response)
    return response


def network_first(
    request: FetchRequest,
    cache: Cache,
    fetcher: Fetcher,
    *,
    offline_fallback: Callable[[], FetchResponse | None] | None = None,
) -> FetchResponse:
    """Fetch first; fall back to the cache, then to the offline document.

    Args:
        request: Request to serve.
        cache: Partition to store into and fall back to.
        fetcher: Network fetcher.
        offline_fallback: Looks up the offline document; consulted only for
            navigation requests.

    Raises:
        NetworkError: When the network fails and no fallback is available.
    """

    try:
        response = fetcher(request)
    except NetworkError:
        logger.info("Network failed, trying cache url=%s cache=%s", request.url, cache.name)
        cached = cache.match(request.url)
        if cached is not None:
            return cached
        if request.is_navigation and offline_fallback is not None:
            offline = offline_fallback()
            if offline is not None:
                logger.info("Serving offline document for url=%s", request.url)
                return offline
        raise
    if response.ok:
        cache.put(request.url, response)
    return response


def stale_while_revalidate(
    request: FetchRequest,
    cache: Cache,
    fetcher: Fetcher,
    *,
    submit: Submit,
) -> FetchResponse | None:
    """Serve the cached entry immediately and refresh it in the background.

    The refresh always runs. Without a cached entry the caller waits for it.

    Args:
        request: Request to serve.
        cache: Partition to read and refresh.
        fetcher: Network fetcher.
        submit: Schedules the refresh (e.g. `ThreadPoolExecutor.submit`).

    Returns:
        The cached response, else the fresh response, else None when the
        refresh failed.
    """

    cached = cache.match(request.url)

    def revalidate() -> FetchResponse | None:
        try:
            response = fetcher(request)
        except NetworkError as exc:
            logger.info("Revalidation failed url=%s: %s", request.url, exc)
            return None
        if response.ok:
            cache.put(request.url, response)
        return response

    future = submit(revalidate)
    if cached is not None:
        return cached
    return future.result()
