"""Audit stored curriculum topics for completeness and consistency."""

from __future__ import annotations

from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from curriculum.audit import DEFAULT_EXPECTED_COUNT, audit_topics, load_curriculum_index
from curriculum.queries import list_topics


class Command(BaseCommand):
    """Report curriculum content issues; fail when any are found."""

    help = "Check topics for missing fields, order gaps, duplicate slugs and invalid animation blocks."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--expected-count",
            type=int,
            default=DEFAULT_EXPECTED_COUNT,
            help="Number of topics the curriculum should contain.",
        )
        parser.add_argument(
            "--index",
            default=str(Path(settings.BASE_DIR) / "docs" / "curriculum-index.md"),
            help="Curriculum index markdown with `N. **Title**` lines (optional).",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        expected_count: int = options["expected_count"]
        if expected_count < 1:
            raise CommandError("--expected-count must be at least 1.")

        titles = load_curriculum_index(Path(options["index"]))
        report = audit_topics(list_topics(), expected_count=expected_count, curriculum_titles=titles)

        self.stdout.write(
            f"[AUDIT] topics={report.total_topics} expected={report.expected_count} "
            f"unique_orders={report.unique_orders} unique_slugs={report.unique_slugs} "
            f"index_titles={len(titles)}"
        )
        for issue_type, issues in report.grouped().items():
            self.stdout.write(f"[AUDIT] {issue_type} ({len(issues)})")
            for issue in issues:
                where = issue.topic or "-"
                self.stdout.write(f"  {where}: {issue.message}")

        if not report.ok:
            raise CommandError(f"Content audit found {len(report.issues)} issue(s).")
        self.stdout.write("[AUDIT] no issues found")
        return None
