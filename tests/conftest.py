"""Pytest fixtures shared across the test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from offline.fetch import FetchRequest, FetchResponse, NetworkError


def doc(*children: dict[str, Any]) -> dict[str, Any]:
    """Return a serialized editor document with the given top-level children."""

    return {"root": {"type": "root", "children": list(children)}}


def text(value: str, fmt: int = 0) -> dict[str, Any]:
    """Return a text node."""

    return {"type": "text", "text": value, "format": fmt}


def heading(tag: str, value: str) -> dict[str, Any]:
    """Return a heading node containing one text run."""

    return {"type": "heading", "tag": tag, "children": [text(value)]}


def paragraph(*children: dict[str, Any]) -> dict[str, Any]:
    """Return a paragraph node."""

    return {"type": "paragraph", "children": list(children)}


class StubFetcher:
    """Fetcher returning canned responses and recording requested URLs.

    Unknown URLs (and every URL while `offline` is set) raise NetworkError.
    """

    def __init__(self, responses: dict[str, FetchResponse] | None = None) -> None:
        self.responses = dict(responses or {})
        self.offline = False
        self.calls: list[str] = []

    def __call__(self, request: FetchRequest) -> FetchResponse:
        self.calls.append(request.url)
        if self.offline or request.url not in self.responses:
            raise NetworkError(f"unreachable: {request.url}")
        return self.responses[request.url]

    def serve(self, url: str, body: bytes = b"ok", status: int = 200) -> FetchResponse:
        response = FetchResponse(url=url, status=status, headers={"Content-Type": "text/html"}, body=body)
        self.responses[url] = response
        return response


@pytest.fixture
def stub_fetcher() -> StubFetcher:
    """Return an empty StubFetcher."""

    return StubFetcher()


@pytest.fixture
def make_topic(db) -> Callable[..., Any]:
    """Return a factory creating Topic rows with sensible defaults."""

    from curriculum.models import Topic

    def _make(order: int = 1, **overrides: Any) -> Topic:
        values: dict[str, Any] = {
            "title": f"Topic {order}",
            "slug": f"topic-{order}",
            "order": order,
            "summary": f"Summary {order}",
            "theory": doc(heading("h2", "Overview"), paragraph(text("Body"))),
            "references": [{"label": "MDN", "url": "https://developer.mozilla.org/"}],
            "practice_demo": {"demoType": "performanceBudgetLab"},
        }
        values.update(overrides)
        return Topic.objects.create(**values)

    return _make


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite is runnable by intent:
    - `unit`: pure, fast tests with no database access.
    - `integration`: tests touching Django, database, views, commands, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
