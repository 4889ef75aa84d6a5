# inventory/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum


def product_name_key(name) -> str:
    """Case-folded name used for uniqueness and lookups (SQLite LOWER is ASCII-only)."""
    return str(name or "").strip().casefold()


class Product(models.Model):
    """
    A stocked item (ingredient, bottle, finished preparation).

    STOCK MODEL (IMPORTANT):
    - quantity is the running balance, mutated ONLY by inventory services
    - every change appends an immutable StockMovement
    - quantity == sum(entradas) - sum(salidas), cancelled and reversal rows excluded
    """

    class StockStatus(models.TextChoices):
        OPTIMO = "optimo", "Stock Óptimo"
        BAJO = "bajo", "Stock Bajo"
        AGOTADO = "agotado", "Agotado"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    name_key = models.CharField(max_length=255, editable=False)

    quantity = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )
    unit = models.CharField(max_length=32)

    # Advisory only: drives classification + reorder hints, never blocks a movement.
    min_stock = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("5.000")
    )

    category = models.CharField(max_length=64, blank=True, default="", db_index=True)

    # Per-product monotonic counter for movement ordering.
    last_sequence = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["name_key"], name="uniq_product_name_ci"),
            models.CheckConstraint(
                condition=Q(quantity__gte=0), name="product_quantity_gte_0"
            ),
            models.CheckConstraint(
                condition=Q(min_stock__gte=0), name="product_min_stock_gte_0"
            ),
        ]
        indexes = [
            models.Index(fields=["category", "name"], name="product_category_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("El nombre del producto es obligatorio.")
        if self.quantity is None or Decimal(self.quantity) < 0:
            raise ValidationError("La cantidad no puede ser negativa.")
        if self.min_stock is None or Decimal(self.min_stock) < 0:
            raise ValidationError("El stock mínimo no puede ser negativo.")

    def save(self, *args, **kwargs):
        self.name_key = product_name_key(self.name)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "name" in update_fields:
            kwargs["update_fields"] = {*update_fields, "name_key"}
        return super().save(*args, **kwargs)

    def next_sequence(self) -> int:
        """Reserve the next movement sequence. Caller saves the product."""
        self.last_sequence = int(self.last_sequence or 0) + 1
        return self.last_sequence

    def ledger_balance(self) -> Decimal:
        """
        Recompute the balance from history.
        Reversal records and cancelled originals are excluded.
        """
        from .stock_movement import StockMovement

        live = self.movements.filter(cancelled=False)
        totals = live.values("movement_type").annotate(total=Sum("amount"))
        by_type = {row["movement_type"]: row["total"] or Decimal("0") for row in totals}

        entradas = by_type.get(StockMovement.MovementType.ENTRADA, Decimal("0"))
        salidas = by_type.get(StockMovement.MovementType.SALIDA, Decimal("0"))
        return entradas - salidas

    @property
    def stock_status(self) -> str:
        qty = Decimal(self.quantity or 0)
        if qty <= 0:
            return self.StockStatus.AGOTADO
        if qty <= Decimal(self.min_stock or 0):
            return self.StockStatus.BAJO
        return self.StockStatus.OPTIMO

    @property
    def is_low_stock(self) -> bool:
        return self.stock_status != self.StockStatus.OPTIMO
