"""Request/response values and the network fetcher used by the offline worker."""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "frontendSystemDesign/offline-worker"


class NetworkError(Exception):
    """Raised when a fetch cannot produce any HTTP response."""


@dataclass(frozen=True, slots=True)
class FetchRequest:
    """An outgoing request as seen by the worker.

    Attributes:
        url: Absolute request URL.
        method: HTTP method; only GET is routed.
        mode: Request mode; `navigate` marks top-level page loads.
    """

    url: str
    method: str = "GET"
    mode: str = "no-cors"

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme.lower()

    @property
    def origin(self) -> str:
        parts = urlsplit(self.url)
        return f"{parts.scheme.lower()}://{parts.netloc.lower()}"

    @property
    def is_navigation(self) -> bool:
        return self.mode == "navigate"


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """A received (or cached) HTTP response."""

    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""

        return 200 <= self.status < 300


class Fetcher(Protocol):
    """Callable performing a network fetch."""

    def __call__(self, request: FetchRequest) -> FetchResponse: ...


class UrllibFetcher:
    """Fetch over HTTP with `urllib.request`.

    Non-2xx statuses are returned as responses; only transport failures
    (DNS, refused connections, timeouts) raise `NetworkError`.
    """

    def __init__(self, *, timeout: float = 30, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.timeout = timeout
        self.user_agent = user_agent

    def __call__(self, request: FetchRequest) -> FetchResponse:
        outgoing = urllib.request.Request(
            request.url,
            method=request.method,
            headers={"User-Agent": self.user_agent},
        )
        try:
            with urllib.request.urlopen(outgoing, timeout=self.timeout) as response:
                return FetchResponse(
                    url=request.url,
                    status=response.status,
                    headers=dict(response.headers.items()),
                    body=response.read(),
                )
        except urllib.error.HTTPError as exc:
            body = exc.read() if exc.fp is not None else b""
            return FetchResponse(url=request.url, status=exc.code, headers=dict(exc.headers.items()), body=body)
        except (urllib.error.URLError, OSError) as exc:
            raise NetworkError(f"Failed to fetch {request.url}: {exc}") from exc
