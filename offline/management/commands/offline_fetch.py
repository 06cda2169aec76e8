"""Route one URL through the offline worker and report how it was served."""

from __future__ import annotations

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from offline.fetch import FetchRequest, NetworkError, UrllibFetcher
from offline.storage import DatabaseCacheStorage
from offline.worker import OfflineWorker, WorkerConfig


class Command(BaseCommand):
    """Fetch a URL via the route table and the database cache storage."""

    help = "Serve one URL through the caching strategies and print the strategy, partition and status."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("url", help="Absolute URL, or a path resolved against --base-url.")
        parser.add_argument("--base-url", default=None, help="Site origin (defaults to SITE_URL).")
        parser.add_argument(
            "--navigate",
            action="store_true",
            help="Treat the request as a page navigation (enables the offline page fallback).",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        config = WorkerConfig.from_settings(options["base_url"])
        request = FetchRequest(
            url=config.absolute(options["url"]),
            mode="navigate" if options["navigate"] else "no-cors",
        )
        worker = OfflineWorker(
            config=config,
            storage=DatabaseCacheStorage(),
            fetcher=UrllibFetcher(timeout=settings.OFFLINE_FETCH_TIMEOUT_SECONDS),
        )
        try:
            match = worker.route_for(request)
            if match is None:
                raise CommandError(f"Not handled by the offline worker: {request.url}")
            response = worker.handle(request)
        except NetworkError as exc:
            raise CommandError(f"Fetch failed with no cached fallback: {exc}") from exc
        finally:
            worker.close()

        partition = match.cache_name or "-"
        self.stdout.write(f"[FETCH] url={request.url} strategy={match.strategy} cache={partition}")
        if response is None:
            self.stdout.write("[FETCH] no response")
        else:
            self.stdout.write(f"[FETCH] status={response.status} bytes={len(response.body)}")
        return None
