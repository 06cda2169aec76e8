"""Admin registrations for offline cache inspection."""

from __future__ import annotations

from django.contrib import admin

from offline.models import CachedResponse, CachePartition


@admin.register(CachePartition)
class CachePartitionAdmin(admin.ModelAdmin):
    """Admin configuration for CachePartition."""

    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(CachedResponse)
class CachedResponseAdmin(admin.ModelAdmin):
    """Read-mostly view of stored responses."""

    list_display = ("url", "partition", "status", "stored_at")
    list_filter = ("partition", "status")
    search_fields = ("url",)
    readonly_fields = ("partition", "url", "status", "headers", "stored_at")
    exclude = ("body",)
