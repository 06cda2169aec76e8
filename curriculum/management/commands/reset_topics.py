"""Delete all curriculum topics (and their animated examples).

Resources and pages are left untouched.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from curriculum.models import AnimatedExample, Topic


class Command(BaseCommand):
    """Delete every topic."""

    help = "Delete all topics and their animated examples."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("--check", action="store_true", help="Dry-run: print what would be deleted.")
        parser.add_argument("--force", action="store_true", help="Required to actually delete rows.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        check: bool = options["check"]
        force: bool = options["force"]

        if check and force:
            raise CommandError("Use either --check or --force, not both.")
        if not check and not force:
            raise CommandError("Refusing to delete without explicit intent; pass --check or --force.")

        mode = "CHECK" if check else "DELETE"
        counts = {
            "topics": Topic.objects.count(),
            "animated_examples": AnimatedExample.objects.count(),
        }
        self.stdout.write(f"[{mode}] would_delete={counts}")
        if check:
            return None

        with transaction.atomic():
            Topic.objects.all().delete()

        self.stdout.write("[DELETE] completed")
        return None
