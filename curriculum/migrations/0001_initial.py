"""Initial schema for curriculum content."""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Topic, AnimatedExample, Resource and Page."""

    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="Topic",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(max_length=120, unique=True)),
                ("order", models.PositiveIntegerField(unique=True)),
                ("summary", models.TextField(blank=True)),
                (
                    "difficulty",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("beginner", "Beginner"),
                            ("intermediate", "Intermediate"),
                            ("advanced", "Advanced"),
                        ],
                        max_length=20,
                    ),
                ),
                ("reading_time_mins", models.PositiveIntegerField(blank=True, null=True)),
                ("theory", models.JSONField(blank=True, null=True)),
                ("theory_animations", models.JSONField(blank=True, default=list)),
                ("references", models.JSONField(blank=True, default=list)),
                ("practice_demo", models.JSONField(blank=True, null=True)),
                ("practice_steps", models.JSONField(blank=True, default=list)),
                ("practice_tasks", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["order"],
            },
        ),
        migrations.CreateModel(
            name="Resource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("resource_number", models.PositiveIntegerField(unique=True)),
                ("summary", models.TextField(blank=True)),
                ("body", models.JSONField(blank=True, null=True)),
                ("references", models.JSONField(blank=True, default=list)),
            ],
            options={
                "ordering": ["resource_number"],
            },
        ),
        migrations.CreateModel(
            name="Page",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                (
                    "slug",
                    models.CharField(
                        help_text="Path below the site root without leading/trailing slashes, e.g. 'about/team'.",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("published", "Published")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("content", models.JSONField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="AnimatedExample",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("example_id", models.SlugField(max_length=120, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("timeline2d", "Timeline (2D)"),
                            ("flow2d", "Flow (2D)"),
                            ("diff2d", "Diff (2D)"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "placement_hint",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("mentalModel", "Mental model"),
                            ("coreConcepts", "Core concepts"),
                            ("tradeoffs", "Trade-offs"),
                            ("caseStudy", "Case study"),
                        ],
                        max_length=20,
                    ),
                ),
                ("controls", models.JSONField(blank=True, null=True)),
                ("what_to_notice", models.JSONField(blank=True, default=list)),
                ("spec", models.JSONField()),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "topic",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="animated_examples",
                        to="curriculum.topic",
                    ),
                ),
            ],
            options={
                "ordering": ["topic__order", "order", "id"],
            },
        ),
    ]
