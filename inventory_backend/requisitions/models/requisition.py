# requisitions/models/requisition.py

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class Requisition(models.Model):
    """
    Internal department request for goods.

    Lifecycle: pending -> completed, exactly once.
    Fulfillment (stock salidas) happens only through
    requisitions.services.fulfillment.process_requisition.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pendiente"
        COMPLETED = "completed", "Completada"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    department = models.CharField(max_length=80)
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.PENDING
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requisitions_created",
    )
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requisitions_processed",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="requisition_status_idx"),
            models.Index(fields=["department", "created_at"], name="requisition_dept_idx"),
        ]

    def __str__(self):
        return f"{self.department} | {self.status} | {self.created_at:%Y-%m-%d}"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING


class RequisitionItem(models.Model):
    """
    One requested line. product is a weak reference: it may be NULL when the
    product was deleted; product_name is the snapshot used as fallback.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    requisition = models.ForeignKey(
        Requisition, on_delete=models.CASCADE, related_name="items"
    )
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requisition_items",
    )
    product_name = models.CharField(max_length=255)

    requested_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=32, blank=True, default="")

    delivered_quantity = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True
    )
    observation = models.CharField(max_length=255, blank=True, default="")

    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=Q(requested_quantity__gt=0),
                name="requisition_item_requested_gt_0",
            ),
            models.CheckConstraint(
                condition=Q(delivered_quantity__isnull=True) | Q(delivered_quantity__gte=0),
                name="requisition_item_delivered_gte_0",
            ),
        ]

    def __str__(self):
        return f"{self.product_name} x {self.requested_quantity} {self.unit}"
