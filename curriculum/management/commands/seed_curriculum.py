"""Seed curriculum topics, resources and pages from a YAML fixture.

Rows are matched on natural keys and upserted. Every row is validated with
the same model `clean()` rules the admin uses; one invalid row aborts the
whole run and nothing is written.
"""

from __future__ import annotations

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from curriculum.seeding import DEFAULT_FIXTURE, SeedError, load_fixture, seed_curriculum


class Command(BaseCommand):
    """Upsert curriculum content from a YAML fixture."""

    help = "Upsert topics, animated examples, resources and pages from a YAML fixture."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--file",
            default=str(DEFAULT_FIXTURE),
            help="Path to the YAML fixture (defaults to the bundled curriculum).",
        )
        parser.add_argument(
            "--check",
            action="store_true",
            help="Dry-run: validate the fixture and report what would change.",
        )
        parser.add_argument(
            "--write",
            action="store_true",
            help="Required to actually write rows.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        check: bool = options["check"]
        write: bool = options["write"]

        if check and write:
            raise CommandError("Use either --check or --write, not both.")
        if not check and not write:
            raise CommandError("Refusing to write without explicit intent; pass --check or --write.")

        mode = "CHECK" if check else "WRITE"
        path = Path(options["file"])
        try:
            data = load_fixture(path)
            summary = seed_curriculum(data, write=write)
        except SeedError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(f"[{mode}] file={path}")
        self.stdout.write(f"[{mode}] created={summary.created}")
        self.stdout.write(f"[{mode}] updated={summary.updated}")
        self.stdout.write(f"[{mode}] unchanged={summary.unchanged}")
        return None
