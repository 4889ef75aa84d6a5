import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("name_key", models.CharField(editable=False, max_length=255)),
                (
                    "quantity",
                    models.DecimalField(
                        decimal_places=3, default=Decimal("0.000"), max_digits=12
                    ),
                ),
                ("unit", models.CharField(max_length=32)),
                (
                    "min_stock",
                    models.DecimalField(
                        decimal_places=3, default=Decimal("5.000"), max_digits=12
                    ),
                ),
                (
                    "category",
                    models.CharField(blank=True, db_index=True, default="", max_length=64),
                ),
                ("last_sequence", models.PositiveIntegerField(default=0, editable=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["category", "name"], name="product_category_name_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("name_key",), name="uniq_product_name_ci"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0)),
                        name="product_quantity_gte_0",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("min_stock__gte", 0)),
                        name="product_min_stock_gte_0",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                (
                    "movement_type",
                    models.CharField(
                        choices=[
                            ("entrada", "Entrada"),
                            ("salida", "Salida"),
                            ("anulacion_entrada", "Anulación de entrada"),
                            ("anulacion_salida", "Anulación de salida"),
                        ],
                        max_length=20,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=3, max_digits=12)),
                ("unit", models.CharField(blank=True, default="", max_length=32)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("sequence", models.PositiveIntegerField()),
                ("source", models.CharField(blank=True, default="", max_length=120)),
                ("destination", models.CharField(blank=True, default="", max_length=120)),
                ("cancelled", models.BooleanField(default=False)),
                ("cancelled_movement_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "cancelled_movement",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reversals",
                        to="inventory.stockmovement",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="movements",
                        to="inventory.product",
                    ),
                ),
            ],
            options={
                "ordering": ["date", "sequence"],
                "indexes": [
                    models.Index(fields=["product", "date"], name="movement_product_date_idx"),
                    models.Index(fields=["movement_type", "date"], name="movement_type_date_idx"),
                    models.Index(fields=["date"], name="movement_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product", "sequence"),
                        name="uniq_movement_product_sequence",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount__gte", 0)),
                        name="movement_amount_gte_0",
                    ),
                ],
            },
        ),
    ]
