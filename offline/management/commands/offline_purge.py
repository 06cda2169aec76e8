"""Delete every stored offline cache partition and response."""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from offline.models import CachedResponse, CachePartition


class Command(BaseCommand):
    """Purge the database-backed offline caches."""

    help = "Delete all offline cache partitions and their stored responses."

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
            "partitions": CachePartition.objects.count(),
            "responses": CachedResponse.objects.count(),
        }
        self.stdout.write(f"[{mode}] would_delete={counts}")
        if check:
            return None

        with transaction.atomic():
            CachePartition.objects.all().delete()

        self.stdout.write("[DELETE] completed")
        return None
