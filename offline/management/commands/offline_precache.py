"""Install the offline worker against a running site.

Pre-caches the app shell (and any extra `--url`s) into the database-backed
cache storage, then activates the current version so partitions from older
versions are removed.
"""

from __future__ import annotations

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from offline.fetch import NetworkError, UrllibFetcher
from offline.storage import DatabaseCacheStorage
from offline.worker import MESSAGE_CACHE_URLS, OfflineWorker, WorkerConfig


class Command(BaseCommand):
    """Pre-cache the app shell and activate the current cache version."""

    help = "Fetch and store the pre-cache URLs, then delete caches from previous versions."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--base-url",
            default=None,
            help="Site origin to fetch from (defaults to SITE_URL).",
        )
        parser.add_argument(
            "--url",
            action="append",
            default=[],
            dest="urls",
            help="Additional path or URL to cache (repeatable).",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        config = WorkerConfig.from_settings(options["base_url"])
        worker = OfflineWorker(
            config=config,
            storage=DatabaseCacheStorage(),
            fetcher=UrllibFetcher(timeout=settings.OFFLINE_FETCH_TIMEOUT_SECONDS),
        )
        try:
            stored = worker.install()
            if options["urls"]:
                stored += worker.message({"type": MESSAGE_CACHE_URLS, "payload": options["urls"]})
            deleted = worker.activate()
        except NetworkError as exc:
            raise CommandError(f"Pre-cache failed: {exc}") from exc
        finally:
            worker.close()

        self.stdout.write(f"[PRECACHE] cache={config.cache_name} stored={len(stored)}")
        for url in stored:
            self.stdout.write(f"  {url}")
        self.stdout.write(f"[ACTIVATE] deleted={deleted}")
        return None
