"""Database-backed cache partitions for the offline worker."""

from __future__ import annotations

from django.db import models


class CachePartition(models.Model):
    """A named cache partition (e.g. `frontend-master-v1`, `pages`)."""

    name = models.CharField(max_length=128, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        """Return the partition name."""

        return self.name


class CachedResponse(models.Model):
    """A stored response keyed by partition and request URL."""

    partition = models.ForeignKey(CachePartition, on_delete=models.CASCADE, related_name="responses")
    url = models.CharField(max_length=2000)
    status = models.PositiveSmallIntegerField()
    headers = models.JSONField(default=dict, blank=True)
    body = models.BinaryField(blank=True, default=b"")
    stored_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["partition__name", "url"]
        constraints = [
            models.UniqueConstraint(fields=["partition", "url"], name="uniq_cached_response_partition_url"),
        ]

    def __str__(self) -> str:
        """Return the partition and URL."""

        return f"{self.partition_id}:{self.url}"
