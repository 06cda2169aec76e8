"""Admin registrations for curriculum content.

The Django admin is the authoring surface for the site. JSON fields are
validated by each model's `clean()` so malformed animation specs or demo
configs are rejected with field errors instead of reaching the public pages.
"""

from __future__ import annotations

from django.contrib import admin

from curriculum.models import AnimatedExample, Page, Resource, Topic


class AnimatedExampleInline(admin.StackedInline):
    """Inline editor for a topic's animated examples."""

    model = AnimatedExample
    extra = 0
    fields = ("example_id", "title", "kind", "placement_hint", "order", "description", "what_to_notice", "controls", "spec")


@admin.register(Topic)
class TopicAdmin(admin.ModelAdmin):
    """Admin configuration for Topic."""

    list_display = ("order", "title", "slug", "difficulty", "updated_at")
    list_display_links = ("title",)
    list_filter = ("difficulty",)
    search_fields = ("title", "slug", "summary")
    prepopulated_fields = {"slug": ("title",)}
    inlines = (AnimatedExampleInline,)
    fieldsets = (
        (None, {"fields": ("title", "slug", "order", "summary", "difficulty", "reading_time_mins")}),
        ("Theory", {"fields": ("theory", "theory_animations", "references")}),
        ("Practice", {"fields": ("practice_demo", "practice_steps", "practice_tasks")}),
    )


@admin.register(AnimatedExample)
class AnimatedExampleAdmin(admin.ModelAdmin):
    """Admin configuration for AnimatedExample."""

    list_display = ("example_id", "title", "kind", "topic", "placement_hint")
    list_filter = ("kind", "placement_hint")
    search_fields = ("example_id", "title")


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    """Admin configuration for Resource."""

    list_display = ("resource_number", "title")
    search_fields = ("title", "summary")


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    """Admin configuration for Page."""

    list_display = ("slug", "title", "status", "updated_at")
    list_filter = ("status",)
    search_fields = ("slug", "title")
