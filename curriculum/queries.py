"""Read helpers for curriculum content used by views, the API and the sitemap."""

from __future__ import annotations

from collections.abc import Sequence

from curriculum.models import Page, Resource, Topic


def list_topics() -> list[Topic]:
    """Return all topics ordered by curriculum order."""

    return list(Topic.objects.order_by("order", "pk"))


def get_topic_by_slug(slug: str) -> Topic | None:
    """Return the topic with `slug`, or None."""

    return Topic.objects.filter(slug=slug).first()


def adjacent_topics(slug: str, topics: Sequence[Topic] | None = None) -> tuple[Topic | None, Topic | None]:
    """Return the previous and next topics around `slug`.

    Args:
        slug: Slug of the current topic.
        topics: Optional pre-fetched ordered topic list, to avoid a second query
            when the caller already has it.

    Returns:
        `(prev, next)`; both None when `slug` is not in the list.
    """

    ordered = list(topics) if topics is not None else list_topics()
    index = next((idx for idx, topic in enumerate(ordered) if topic.slug == slug), None)
    if index is None:
        return None, None
    prev_topic = ordered[index - 1] if index > 0 else None
    next_topic = ordered[index + 1] if index < len(ordered) - 1 else None
    return prev_topic, next_topic


def get_page_by_slug(slug: str) -> Page | None:
    """Return the published page at `slug` (a `/`-joined path), or None."""

    normalized = "/".join(part for part in slug.split("/") if part)
    return Page.objects.filter(slug=normalized, status=Page.Status.PUBLISHED).first()


def list_resources() -> list[Resource]:
    """Return all resources ordered by resource number."""

    return list(Resource.objects.order_by("resource_number"))


def get_resource_by_number(number: int) -> Resource | None:
    """Return the resource with `number`, or None."""

    return Resource.objects.filter(resource_number=number).first()
