"""Route table mapping request URLs to caching strategies.

The same table drives the browser service worker (rendered by
`offline.views.service_worker`) and the Python `OfflineWorker`, so both agree
on which partition answers a given URL.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from offline.fetch import FetchRequest

CACHE_FIRST: Final = "cache-first"
NETWORK_FIRST: Final = "network-first"
STALE_WHILE_REVALIDATE: Final = "stale-while-revalidate"
NETWORK_ONLY: Final = "network-only"

STRATEGIES: Final[tuple[str, ...]] = (CACHE_FIRST, NETWORK_FIRST, STALE_WHILE_REVALIDATE, NETWORK_ONLY)


@dataclass(frozen=True, slots=True)
class CacheRoute:
    """One entry of the route table.

    Attributes:
        pattern: Compiled regex tested anywhere in the absolute URL.
        strategy: One of `STRATEGIES`.
        cache_name: Cache partition the strategy reads and writes.
    """

    pattern: re.Pattern[str]
    strategy: str
    cache_name: str

    def matches(self, url: str) -> bool:
        return self.pattern.search(url) is not None

    def as_js(self) -> str:
        """Return the pattern as a JavaScript regex literal."""

        source = self.pattern.pattern.replace("/", r"\/")
        flags = "i" if self.pattern.flags & re.IGNORECASE else ""
        return f"/{source}/{flags}"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """The strategy and partition chosen for a request.

    `route` is None when the request fell through to the default handling.
    """

    strategy: str
    cache_name: str
    route: CacheRoute | None = None


def route(pattern: str, strategy: str, cache_name: str, *, ignore_case: bool = False) -> CacheRoute:
    """Build a CacheRoute, rejecting unknown strategies."""

    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown caching strategy: {strategy}")
    flags = re.IGNORECASE if ignore_case else 0
    return CacheRoute(pattern=re.compile(pattern, flags), strategy=strategy, cache_name=cache_name)


def default_routes(static_url: str = "/static/") -> tuple[CacheRoute, ...]:
    """Return the site's route table, most specific first.

    Args:
        static_url: Prefix under which collected static files are served.
    """

    static = re.escape(static_url.rstrip("/") + "/")
    return (
        route(static + r".*\.js$", CACHE_FIRST, "static-js"),
        route(static + r".*\.css$", CACHE_FIRST, "static-css"),
        route(static + r"media/.*", CACHE_FIRST, "static-media"),
        route(r"\.(?:jpg|jpeg|gif|png|svg|ico|webp)$", STALE_WHILE_REVALIDATE, "images", ignore_case=True),
        route(r"\.(?:woff|woff2|ttf|otf|eot)$", CACHE_FIRST, "fonts", ignore_case=True),
        route(r"^https://fonts\.googleapis\.com/.*", STALE_WHILE_REVALIDATE, "google-fonts-css"),
        route(r"^https://fonts\.gstatic\.com/.*", CACHE_FIRST, "google-fonts-files"),
        route(r"/api/.*", NETWORK_FIRST, "api-routes"),
        route(r"^https?://[^/]+/.*", NETWORK_FIRST, "pages"),
    )


def is_routable(request: FetchRequest) -> bool:
    """True for GET requests over http(s); everything else bypasses the worker."""

    return request.method.upper() == "GET" and request.scheme in ("http", "https")


def select_route(
    request: FetchRequest,
    routes: Sequence[CacheRoute],
    *,
    origin: str,
    main_cache: str,
) -> RouteMatch | None:
    """Pick the strategy for a request.

    The first route whose pattern matches wins. Unmatched same-origin requests
    use network-first against `main_cache`; unmatched cross-origin requests go
    to the network only.

    Returns:
        The match, or None when the request is not routable.
    """

    if not is_routable(request):
        return None
    for candidate in routes:
        if candidate.matches(request.url):
            return RouteMatch(strategy=candidate.strategy, cache_name=candidate.cache_name, route=candidate)
    if request.origin == origin.rstrip("/").lower():
        return RouteMatch(strategy=NETWORK_FIRST, cache_name=main_cache)
    return RouteMatch(strategy=NETWORK_ONLY, cache_name="")


def routes_as_js(routes: Sequence[CacheRoute]) -> list[dict[str, str]]:
    """Return template-ready route rows for the service worker script."""

    return [{"pattern": r.as_js(), "strategy": r.strategy, "cache_name": r.cache_name} for r in routes]
