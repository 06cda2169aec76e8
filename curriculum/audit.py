"""Content audit for curriculum topics.

The audit compares stored topics against the expected curriculum shape:
required fields, a contiguous `1..N` order range, unique slugs, titles that
match the curriculum index, theory documents that contain headings, and
animation blocks that pass schema validation.
"""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from core.animations.validator import parse_theory_animations
from core.richtext import has_headings, root_node
from curriculum.models import Topic

DEFAULT_EXPECTED_COUNT = 12

_INDEX_LINE = re.compile(r"^\d+\.\s+\*\*(.+?)\*\*")


@dataclass(frozen=True, slots=True)
class AuditIssue:
    """A single audit finding.

    Attributes:
        type: Issue category (e.g. `missing_field`, `duplicate_order`).
        topic: Slug of the offending topic, or None for collection-level issues.
        message: Human-readable description.
    """

    type: str
    topic: str | None
    message: str


@dataclass(slots=True)
class AuditReport:
    """Collected audit findings and summary counts."""

    total_topics: int
    expected_count: int
    unique_orders: int
    unique_slugs: int
    issues: list[AuditIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def grouped(self) -> dict[str, list[AuditIssue]]:
        """Return issues grouped by type, preserving discovery order."""

        groups: dict[str, list[AuditIssue]] = defaultdict(list)
        for issue in self.issues:
            groups[issue.type].append(issue)
        return dict(groups)


def parse_curriculum_index(text: str) -> list[str]:
    """Extract ordered topic titles from a curriculum index markdown file.

    Titles are read from numbered bold lines such as `1. **Foundations**`.
    """

    titles: list[str] = []
    for line in text.splitlines():
        match = _INDEX_LINE.match(line)
        if match:
            titles.append(match.group(1).strip())
    return titles


def load_curriculum_index(path: Path) -> list[str]:
    """Read and parse a curriculum index file; missing files yield []."""

    if not path.exists():
        return []
    return parse_curriculum_index(path.read_text(encoding="utf-8"))


def audit_topics(
    topics: Sequence[Topic],
    *,
    expected_count: int = DEFAULT_EXPECTED_COUNT,
    curriculum_titles: Iterable[str] = (),
) -> AuditReport:
    """Audit topics against the curriculum expectations.

    Args:
        topics: Topics to audit (typically all topics ordered by `order`).
        expected_count: Number of topics the curriculum should contain; orders
            must cover `1..expected_count`.
        curriculum_titles: Optional expected titles, indexed by `order - 1`.

    Returns:
        AuditReport with all findings.
    """

    titles = list(curriculum_titles)
    issues: list[AuditIssue] = []
    seen_orders: set[int] = set()
    seen_slugs: set[str] = set()

    for topic in topics:
        slug = topic.slug or "unknown"

        if not topic.title:
            issues.append(AuditIssue("missing_field", slug, "missing title"))
        if not topic.slug:
            issues.append(AuditIssue("missing_field", slug, "missing slug"))
        if topic.order is None:
            issues.append(AuditIssue("missing_field", slug, "missing order"))
        if root_node(topic.theory) is None:
            issues.append(AuditIssue("empty_section", slug, "empty theory section"))
        elif not has_headings(topic.theory):
            issues.append(AuditIssue("no_headings", slug, "theory has no headings"))
        if not topic.practice_demo:
            issues.append(AuditIssue("missing_field", slug, "missing practiceDemo"))
        if not topic.references:
            issues.append(AuditIssue("missing_references", slug, "no references"))

        if topic.order is not None:
            if topic.order in seen_orders:
                issues.append(AuditIssue("duplicate_order", slug, f"duplicate order {topic.order}"))
            seen_orders.add(topic.order)
            if not 1 <= topic.order <= expected_count:
                issues.append(
                    AuditIssue("invalid_order_range", slug, f"order {topic.order} not in range 1-{expected_count}")
                )
            if titles and 0 < topic.order <= len(titles):
                expected_title = titles[topic.order - 1]
                if topic.title != expected_title:
                    issues.append(
                        AuditIssue(
                            "title_mismatch",
                            slug,
                            f"order {topic.order}: expected {expected_title!r}, actual {topic.title!r}",
                        )
                    )

        if slug in seen_slugs:
            issues.append(AuditIssue("duplicate_slug", slug, "duplicate slug"))
        seen_slugs.add(slug)

        animations = parse_theory_animations(topic.theory_animations or [])
        if not animations.success:
            issues.append(AuditIssue("invalid_animations", slug, animations.error or "invalid animation blocks"))

    for order in range(1, expected_count + 1):
        if order not in seen_orders:
            issues.append(AuditIssue("missing_order", None, f"missing order {order}"))

    return AuditReport(
        total_topics=len(topics),
        expected_count=expected_count,
        unique_orders=len(seen_orders),
        unique_slugs=len(seen_slugs),
        issues=issues,
    )
