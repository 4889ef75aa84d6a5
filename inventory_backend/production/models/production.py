# production/models/production.py

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Production(models.Model):
    """
    One kitchen transformation run: a raw material is consumed and
    one or more products are produced.

    Created only by production.services.production_service.create_production.
    Immutable; there is no reversal path.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    date = models.DateTimeField(default=timezone.now)

    raw_material = models.ForeignKey(
        "inventory.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="productions_consumed",
    )
    raw_material_name = models.CharField(max_length=255)
    raw_material_unit = models.CharField(max_length=32, blank=True, default="")
    raw_material_quantity_used = models.DecimalField(max_digits=12, decimal_places=3)

    # recorded only; never touches stock
    waste_quantity = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True
    )
    waste_unit = models.CharField(max_length=32, blank=True, default="")

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="productions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date"]
        indexes = [
            models.Index(fields=["date"], name="production_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(raw_material_quantity_used__gt=0),
                name="production_quantity_used_gt_0",
            ),
        ]

    def __str__(self):
        return f"{self.raw_material_name} -> {self.date:%Y-%m-%d %H:%M}"


class ProductionOutput(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    production = models.ForeignKey(
        Production, on_delete=models.CASCADE, related_name="outputs"
    )
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_outputs",
    )
    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=32, blank=True, default="")
    category = models.CharField(max_length=64, blank=True, default="")
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="production_output_quantity_gt_0",
            ),
        ]

    def __str__(self):
        return f"{self.product_name} x {self.quantity} {self.unit}"
