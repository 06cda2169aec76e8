"""Allow duplicate topic orders; the content audit reports them instead."""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    """Drop the unique constraint on `Topic.order`."""

    dependencies = [
        ("curriculum", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="topic",
            name="order",
            field=models.PositiveIntegerField(),
        ),
    ]
