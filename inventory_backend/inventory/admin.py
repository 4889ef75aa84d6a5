# inventory/admin.py
"""
=====================================================
PATH: inventory/admin.py
=====================================================

Admin rules (audit-safe ledger):

- New products are routed through create_product() so the seeding
  entrada movement is always written.
- quantity is read-only after creation; it only changes through movements.
- StockMovement rows are immutable: no add / change / delete in admin.
"""

from __future__ import annotations

from django.contrib import admin, messages

from inventory.models import Product, StockMovement
from inventory.services.errors import LedgerError
from inventory.services.ledger import create_product


class StockMovementInline(admin.TabularInline):
    model = StockMovement
    fk_name = "product"
    extra = 0
    can_delete = False
    ordering = ("-date", "-sequence")
    fields = (
        "date",
        "sequence",
        "movement_type",
        "amount",
        "unit",
        "source",
        "destination",
        "cancelled",
        "performed_by",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "quantity", "unit", "min_stock", "updated_at")
    list_filter = ("category",)
    search_fields = ("name",)
    ordering = ("name",)
    inlines = [StockMovementInline]

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ("last_sequence",)
        return ("quantity", "last_sequence", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        if change:
            # quantity is read-only here; name/unit/min_stock/category only
            super().save_model(request, obj, form, change)
            return

        try:
            created = create_product(
                name=obj.name,
                unit=obj.unit,
                initial_quantity=obj.quantity,
                min_stock=obj.min_stock,
                category=obj.category,
                user=request.user,
            )
        except LedgerError as exc:
            self.message_user(request, exc.message, level=messages.ERROR)
            return

        # admin redirects using obj.pk
        obj.pk = created.pk
        obj._state.adding = False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "product",
        "movement_type",
        "amount",
        "unit",
        "source",
        "destination",
        "cancelled",
    )
    list_filter = ("movement_type", "cancelled")
    search_fields = ("product__name", "source", "destination")
    ordering = ("-date", "-sequence")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
