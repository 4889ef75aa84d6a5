# inventory/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable movement record.

GUARANTEES:
- Append-only: created ONCE, never edited, never deleted directly
- The only permitted change is cancelled False -> True, once,
  performed by the reversal service via flag_cancelled()
- amount is non-negative; the sign is carried by movement_type
- Reversal rows (anulacion_*) must reference the movement they reverse
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        ENTRADA = "entrada", "Entrada"
        SALIDA = "salida", "Salida"
        ANULACION_ENTRADA = "anulacion_entrada", "Anulación de entrada"
        ANULACION_SALIDA = "anulacion_salida", "Anulación de salida"

    REVERSIBLE_TYPES = {MovementType.ENTRADA, MovementType.SALIDA}

    REVERSAL_TYPE_FOR = {
        MovementType.ENTRADA: MovementType.ANULACION_ENTRADA,
        MovementType.SALIDA: MovementType.ANULACION_SALIDA,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)

    amount = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=32, blank=True, default="")

    # Client clock at the time of the operation.
    date = models.DateTimeField(default=timezone.now)
    sequence = models.PositiveIntegerField()

    # entrada-type: where it came from; salida-type: where it went
    source = models.CharField(max_length=120, blank=True, default="")
    destination = models.CharField(max_length=120, blank=True, default="")

    cancelled = models.BooleanField(default=False)

    cancelled_movement = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="reversals",
    )
    cancelled_movement_date = models.DateTimeField(null=True, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "sequence"], name="uniq_movement_product_sequence"
            ),
            models.CheckConstraint(
                condition=Q(amount__gte=0), name="movement_amount_gte_0"
            ),
        ]
        indexes = [
            models.Index(fields=["product", "date"], name="movement_product_date_idx"),
            models.Index(fields=["movement_type", "date"], name="movement_type_date_idx"),
            models.Index(fields=["date"], name="movement_date_idx"),
        ]

    @property
    def is_reversal(self) -> bool:
        return self.movement_type not in self.REVERSIBLE_TYPES

    @property
    def is_inbound(self) -> bool:
        return self.movement_type in {
            self.MovementType.ENTRADA,
            self.MovementType.ANULACION_SALIDA,
        }

    def clean(self):
        if self.amount is None or self.amount < 0:
            raise ValidationError("amount cannot be negative")

        if self.is_reversal and not self.cancelled_movement_id:
            raise ValidationError("Reversal records must reference the cancelled movement")

        if not self.is_reversal and self.cancelled_movement_id:
            raise ValidationError("Only reversal records may reference another movement")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def flag_cancelled(self) -> bool:
        """
        Flip cancelled False -> True at the row level.
        Returns False if the row was already flagged.
        """
        updated = (
            StockMovement.objects
            .filter(pk=self.pk, cancelled=False)
            .update(cancelled=True)
        )
        if updated:
            self.cancelled = True
        return bool(updated)

    def __str__(self):
        product_name = getattr(self.product, "name", "Producto")
        return f"{product_name} | {self.movement_type} | {self.amount}"
