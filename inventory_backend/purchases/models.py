# purchases/models.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES)


User = settings.AUTH_USER_MODEL


class Provider(models.Model):
    """
    Supplier contact, keyed by phone.

    Saved (or bumped) every time an order is sent to it; the most recently
    used ones are offered first.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, unique=True)

    last_used = models.DateTimeField(default=timezone.now)
    use_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-last_used"]
        indexes = [
            models.Index(fields=["last_used"], name="provider_last_used_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone})"


class Invoice(models.Model):
    """
    Supplier invoice record.

    Invoices are bookkeeping only: they never move stock.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"

    STATUSES = [
        (STATUS_PENDING, "Pendiente"),
        (STATUS_PAID, "Pagada"),
    ]

    SOURCE_MANUAL = "manual"
    SOURCE_WHATSAPP = "whatsapp"
    SOURCE_ASSISTANT = "ia_chatbot"

    SOURCES = [
        (SOURCE_MANUAL, "Manual"),
        (SOURCE_WHATSAPP, "WhatsApp"),
        (SOURCE_ASSISTANT, "Asistente IA"),
    ]

    invoice_number = models.CharField(max_length=64)
    provider = models.CharField(max_length=200)
    date = models.DateTimeField(default=timezone.now)

    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_PENDING)
    source = models.CharField(max_length=16, choices=SOURCES, default=SOURCE_MANUAL)

    raw_text = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="invoice_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "date"], name="invoice_status_date_idx"),
            models.Index(fields=["provider", "date"], name="invoice_provider_date_idx"),
        ]

    def clean(self):
        if not (self.invoice_number or "").strip():
            raise ValidationError({"invoice_number": "El número de factura es obligatorio."})

        if not (self.provider or "").strip():
            raise ValidationError({"provider": "El proveedor es obligatorio."})

        if self.total_amount is not None and self.total_amount < Decimal("0.00"):
            raise ValidationError({"total_amount": "El total no puede ser negativo."})

    def save(self, *args, **kwargs):
        if self.invoice_number is not None:
            self.invoice_number = self.invoice_number.strip()
        if self.provider is not None:
            self.provider = self.provider.strip()

        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def items_total(self) -> Decimal:
        return _money(sum((item.line_total for item in self.items.all()), Decimal("0.00")))

    def __str__(self):
        return f"#{self.invoice_number} ({self.provider})"


class InvoiceItem(models.Model):
    """
    Invoice line. product_name is free text: lines are not linked to
    inventory products.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=32, blank=True, default="")
    price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="invoice_item_quantity_nonnegative",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=Decimal("0.00")),
                name="invoice_item_price_nonnegative",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return _money(Decimal(str(self.quantity)) * Decimal(str(self.price)))

    def __str__(self):
        return f"{self.product_name} x {self.quantity} {self.unit}"
