import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Production",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("raw_material_name", models.CharField(max_length=255)),
                ("raw_material_unit", models.CharField(blank=True, default="", max_length=32)),
                (
                    "raw_material_quantity_used",
                    models.DecimalField(decimal_places=3, max_digits=12),
                ),
                (
                    "waste_quantity",
                    models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True),
                ),
                ("waste_unit", models.CharField(blank=True, default="", max_length=32)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="productions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "raw_material",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="productions_consumed",
                        to="inventory.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-date"],
                "indexes": [
                    models.Index(fields=["date"], name="production_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("raw_material_quantity_used__gt", 0)),
                        name="production_quantity_used_gt_0",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductionOutput",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("product_name", models.CharField(max_length=255)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("unit", models.CharField(blank=True, default="", max_length=32)),
                ("category", models.CharField(blank=True, default="", max_length=64)),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="production_outputs",
                        to="inventory.product",
                    ),
                ),
                (
                    "production",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="outputs",
                        to="production.production",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="production_output_quantity_gt_0",
                    ),
                ],
            },
        ),
    ]
