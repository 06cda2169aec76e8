"""Database models for curriculum content.

Content is authored through the Django admin (or seeded from YAML) and is read
by the public site. Rich text fields hold serialized editor documents
(`{"root": {"children": [...]}}`) and are rendered by `core.richtext`.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.urls import reverse

from core.animations.validator import parse_theory_animations, validate_spec
from core.practice import parse_demo_config, validate_practice_steps, validate_practice_tasks


def _validate_reference_list(value: object, *, require_note_keys: bool = False) -> list[str]:
    """Return error messages for a reference list JSON value."""

    if value in (None, ""):
        return []
    if not isinstance(value, list):
        return ["must be a list of {label, url} objects"]
    errors: list[str] = []
    for idx, row in enumerate(value):
        if not isinstance(row, dict):
            errors.append(f"{idx}: expected an object")
            continue
        for key in ("label", "url"):
            if not isinstance(row.get(key), str) or not row.get(key, "").strip():
                errors.append(f"{idx}.{key}: required")
        if require_note_keys:
            for key in ("note", "claimIds"):
                if row.get(key) is not None and not isinstance(row.get(key), str):
                    errors.append(f"{idx}.{key}: expected a string")
    return errors


class Topic(models.Model):
    """A curriculum unit with theory and practice content."""

    class Difficulty(models.TextChoices):
        """Optional difficulty label shown on topic cards."""

        BEGINNER = "beginner", "Beginner"
        INTERMEDIATE = "intermediate", "Intermediate"
        ADVANCED = "advanced", "Advanced"

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=120, unique=True)
    order = models.PositiveIntegerField()
    summary = models.TextField(blank=True)
    difficulty = models.CharField(max_length=20, choices=Difficulty.choices, blank=True)
    reading_time_mins = models.PositiveIntegerField(null=True, blank=True)
    theory = models.JSONField(null=True, blank=True)
    theory_animations = models.JSONField(default=list, blank=True)
    references = models.JSONField(default=list, blank=True)
    practice_demo = models.JSONField(null=True, blank=True)
    practice_steps = models.JSONField(default=list, blank=True)
    practice_tasks = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order"]

    def __str__(self) -> str:
        """Return a concise display string for admin/debug usage."""

        return f"{self.order}. {self.title}"

    def get_absolute_url(self) -> str:
        """Return the public topic URL."""

        return reverse("core:topic_detail", kwargs={"slug": self.slug})

    def clean(self) -> None:
        """Validate JSON content fields before saving from the admin."""

        errors: dict[str, list[str]] = {}

        animations = parse_theory_animations(self.theory_animations or [])
        if not animations.success:
            errors["theory_animations"] = [animations.error or "invalid animation blocks"]

        reference_errors = _validate_reference_list(self.references, require_note_keys=True)
        if reference_errors:
            errors["references"] = reference_errors

        if self.practice_demo:
            demo = parse_demo_config(self.practice_demo)
            if not demo.success:
                errors["practice_demo"] = [demo.error or "invalid demo configuration"]

        step_errors = validate_practice_steps(self.practice_steps)
        if step_errors:
            errors["practice_steps"] = step_errors
        task_errors = validate_practice_tasks(self.practice_tasks)
        if task_errors:
            errors["practice_tasks"] = task_errors

        if errors:
            raise ValidationError(errors)


class AnimatedExample(models.Model):
    """A JSON-described 2D diagram embedded in a topic's theory tab."""

    class Kind(models.TextChoices):
        """Supported diagram kinds."""

        TIMELINE_2D = "timeline2d", "Timeline (2D)"
        FLOW_2D = "flow2d", "Flow (2D)"
        DIFF_2D = "diff2d", "Diff (2D)"

    class PlacementHint(models.TextChoices):
        """Theory section the example is intended to sit next to."""

        MENTAL_MODEL = "mentalModel", "Mental model"
        CORE_CONCEPTS = "coreConcepts", "Core concepts"
        TRADEOFFS = "tradeoffs", "Trade-offs"
        CASE_STUDY = "caseStudy", "Case study"

    example_id = models.SlugField(max_length=120, unique=True)
    topic = models.ForeignKey(Topic, on_delete=models.CASCADE, related_name="animated_examples")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    kind = models.CharField(max_length=20, choices=Kind.choices)
    placement_hint = models.CharField(max_length=20, choices=PlacementHint.choices, blank=True)
    controls = models.JSONField(null=True, blank=True)
    what_to_notice = models.JSONField(default=list, blank=True)
    spec = models.JSONField()
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["topic__order", "order", "id"]

    def __str__(self) -> str:
        """Return the example id and kind."""

        return f"{self.example_id} ({self.kind})"

    def clean(self) -> None:
        """Validate the spec against the schema for `kind`."""

        result = validate_spec(self.kind, self.spec)
        if not result.success:
            raise ValidationError({"spec": [result.error or "invalid spec"]})
        if not isinstance(self.what_to_notice, list) or not all(
            isinstance(item, str) for item in self.what_to_notice
        ):
            raise ValidationError({"what_to_notice": ["must be a list of strings"]})


class Resource(models.Model):
    """A numbered reading resource with optional references."""

    title = models.CharField(max_length=255)
    resource_number = models.PositiveIntegerField(unique=True)
    summary = models.TextField(blank=True)
    body = models.JSONField(null=True, blank=True)
    references = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["resource_number"]

    def __str__(self) -> str:
        """Return the resource number and title."""

        return f"#{self.resource_number} {self.title}"

    def get_absolute_url(self) -> str:
        """Return the public resource URL."""

        return reverse("core:resource_detail", kwargs={"number": self.resource_number})

    def clean(self) -> None:
        """Validate the reference list shape."""

        errors = _validate_reference_list(self.references)
        if errors:
            raise ValidationError({"references": errors})


class Page(models.Model):
    """A free-form content page addressed by a (possibly nested) slug path."""

    class Status(models.TextChoices):
        """Publication state; only published pages are served."""

        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"

    title = models.CharField(max_length=255)
    slug = models.CharField(
        max_length=255,
        unique=True,
        help_text="Path below the site root without leading/trailing slashes, e.g. 'about/team'.",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    content = models.JSONField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        """Return the page slug and status."""

        return f"{self.slug} ({self.status})"

    def get_absolute_url(self) -> str:
        """Return the public page URL."""

        return reverse("core:page", kwargs={"path": self.slug})

    def clean(self) -> None:
        """Normalize the slug path."""

        self.slug = "/".join(part for part in (self.slug or "").split("/") if part.strip())
        if not self.slug:
            raise ValidationError({"slug": ["must not be empty"]})
