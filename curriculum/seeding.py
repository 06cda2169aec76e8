"""Seed curriculum content from a YAML fixture.

Fixtures use a compact authoring format. Rich text fields may be written as
a list of block shorthands instead of a full serialized editor tree:

    theory:
      - h2: Overview
      - p: Frontend system design is ...
      - ul: [first point, second point]
      - code: "const x = 1;"
      - quote: A quotation.

Any field that already looks like a serialized document (a mapping with
`root`) is stored unchanged.

Rows are matched on their natural keys (topic slug, example id, resource
number, page slug) and upserted. Rows are validated with `full_clean()` and
saved one at a time inside a single transaction; an invalid row raises and
the transaction rolls back every row written before it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from django.core.exceptions import ValidationError
from django.db import models, transaction

from curriculum.models import AnimatedExample, Page, Resource, Topic

logger = logging.getLogger(__name__)

DEFAULT_FIXTURE = Path(__file__).resolve().parent / "fixtures" / "curriculum.yaml"

TOPIC_FIELDS = (
    "title",
    "order",
    "summary",
    "difficulty",
    "reading_time_mins",
    "theory",
    "theory_animations",
    "references",
    "practice_demo",
    "practice_steps",
    "practice_tasks",
)
EXAMPLE_FIELDS = ("title", "description", "kind", "placement_hint", "controls", "what_to_notice", "spec", "order")
RESOURCE_FIELDS = ("title", "summary", "body", "references")
PAGE_FIELDS = ("title", "status", "content")
RICH_TEXT_FIELDS = {"theory", "body", "content"}


class SeedError(ValueError):
    """Raised when fixture content is malformed or fails model validation."""


@dataclass(slots=True)
class SeedSummary:
    """Counts of rows that were (or would be) created, updated or unchanged."""

    created: dict[str, int] = field(default_factory=dict)
    updated: dict[str, int] = field(default_factory=dict)
    unchanged: dict[str, int] = field(default_factory=dict)

    def record(self, kind: str, outcome: str) -> None:
        bucket = getattr(self, outcome)
        bucket[kind] = bucket.get(kind, 0) + 1

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {"created": dict(self.created), "updated": dict(self.updated), "unchanged": dict(self.unchanged)}


def _text_node(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text, "format": 0, "version": 1}


def _block_node(block: object) -> dict[str, Any]:
    """Convert one authoring shorthand into an editor node."""

    if isinstance(block, str):
        return {"type": "paragraph", "children": [_text_node(block)]}
    if not isinstance(block, Mapping) or len(block) != 1:
        raise SeedError(f"Rich text block must be a string or a single-key mapping, got {block!r}")

    (key, value), = block.items()
    if key in ("h1", "h2", "h3", "h4", "h5", "h6"):
        return {"type": "heading", "tag": key, "children": [_text_node(str(value))]}
    if key == "p":
        return {"type": "paragraph", "children": [_text_node(str(value))]}
    if key in ("ul", "ol"):
        if not isinstance(value, list):
            raise SeedError(f"List block {key!r} must contain a list of strings")
        return {
            "type": "list",
            "listType": "number" if key == "ol" else "bullet",
            "children": [{"type": "listitem", "children": [_text_node(str(item))]} for item in value],
        }
    if key == "code":
        return {"type": "code", "children": [_text_node(str(value))]}
    if key == "quote":
        return {"type": "quote", "children": [_text_node(str(value))]}
    raise SeedError(f"Unknown rich text block type {key!r}")


def build_document(value: object) -> dict[str, Any] | None:
    """Return a serialized editor document for a fixture rich text value.

    Args:
        value: A full document (mapping with `root`), a list of block
            shorthands, a plain string (one paragraph), or None.

    Returns:
        Serialized document, or None for empty values.
    """

    if value in (None, "", []):
        return None
    if isinstance(value, Mapping) and "root" in value:
        return dict(value)
    blocks = value if isinstance(value, list) else [value]
    return {
        "root": {
            "type": "root",
            "version": 1,
            "children": [_block_node(block) for block in blocks],
        }
    }


def load_fixture(path: Path) -> dict[str, Any]:
    """Load and minimally shape-check a YAML fixture file."""

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise SeedError(f"Could not read fixture {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SeedError(f"Fixture {path} must contain a mapping at the top level.")
    for key in ("topics", "resources", "pages"):
        if key in data and not isinstance(data[key], list):
            raise SeedError(f"Fixture key {key!r} must be a list.")
    return data


def _field_values(row: Mapping[str, Any], names: tuple[str, ...]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in names:
        if name not in row:
            continue
        value = row[name]
        if name in RICH_TEXT_FIELDS:
            value = build_document(value)
        values[name] = "" if value is None and name in ("summary", "difficulty", "description", "placement_hint") else value
    return values


def _stage(instance: models.Model, values: dict[str, Any], *, label: str, exclude: list[str] | None = None) -> str:
    """Apply values to `instance`, validate it, and return the outcome name."""

    outcome = "created" if instance.pk is None else "unchanged"
    for name, value in values.items():
        if getattr(instance, name) != value:
            setattr(instance, name, value)
            if outcome == "unchanged":
                outcome = "updated"
    try:
        instance.full_clean(exclude=exclude)
    except ValidationError as exc:
        raise SeedError(f"{label}: {exc.message_dict}") from exc
    return outcome


def seed_curriculum(data: Mapping[str, Any], *, write: bool) -> SeedSummary:
    """Upsert fixture content.

    Args:
        data: Parsed fixture mapping (see `load_fixture`).
        write: When False, validate and count changes without saving.

    Returns:
        SeedSummary describing created/updated/unchanged rows.

    Raises:
        SeedError: When any row is malformed or fails validation. Nothing is
            written in that case.
    """

    summary = SeedSummary()
    with transaction.atomic():
        for row in data.get("topics") or []:
            if not isinstance(row, Mapping) or not row.get("slug"):
                raise SeedError(f"Topic rows require a slug: {row!r}")
            slug = str(row["slug"])
            topic = Topic.objects.filter(slug=slug).first() or Topic(slug=slug)
            outcome = _stage(topic, _field_values(row, TOPIC_FIELDS), label=f"topic {slug}")
            summary.record("topics", outcome)
            if write and outcome != "unchanged":
                topic.save()

            for example_row in row.get("animated_examples") or []:
                if not isinstance(example_row, Mapping) or not example_row.get("example_id"):
                    raise SeedError(f"Animated examples under {slug} require an example_id.")
                example_id = str(example_row["example_id"])
                example = AnimatedExample.objects.filter(example_id=example_id).first() or AnimatedExample(
                    example_id=example_id
                )
                if topic.pk is not None:
                    example.topic = topic
                values = _field_values(example_row, EXAMPLE_FIELDS)
                # New topics have no pk during a dry run; skip the FK check then.
                exclude = ["topic"] if topic.pk is None else None
                example_outcome = _stage(example, values, label=f"animated example {example_id}", exclude=exclude)
                summary.record("animated_examples", example_outcome)
                if write and example_outcome != "unchanged":
                    example.topic = topic
                    example.save()

        for row in data.get("resources") or []:
            if not isinstance(row, Mapping) or row.get("resource_number") is None:
                raise SeedError(f"Resource rows require a resource_number: {row!r}")
            number = int(row["resource_number"])
            resource = Resource.objects.filter(resource_number=number).first() or Resource(resource_number=number)
            outcome = _stage(resource, _field_values(row, RESOURCE_FIELDS), label=f"resource {number}")
            summary.record("resources", outcome)
            if write and outcome != "unchanged":
                resource.save()

        for row in data.get("pages") or []:
            if not isinstance(row, Mapping) or not row.get("slug"):
                raise SeedError(f"Page rows require a slug: {row!r}")
            slug = "/".join(part for part in str(row["slug"]).split("/") if part)
            page = Page.objects.filter(slug=slug).first() or Page(slug=slug)
            outcome = _stage(page, _field_values(row, PAGE_FIELDS), label=f"page {slug}")
            summary.record("pages", outcome)
            if write and outcome != "unchanged":
                page.save()

        if not write:
            transaction.set_rollback(True)

    logger.info("Curriculum seed write=%s summary=%s", write, summary.as_dict())
    return summary
