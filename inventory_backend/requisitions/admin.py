from django.contrib import admin

from requisitions.models import Requisition, RequisitionItem


class RequisitionItemInline(admin.TabularInline):
    model = RequisitionItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "requested_quantity",
        "unit",
        "delivered_quantity",
        "observation",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Requisition)
class RequisitionAdmin(admin.ModelAdmin):
    """
    Read-only: processing must go through the fulfillment service
    so stock and history stay consistent.
    """

    list_display = ("department", "status", "created_at", "processed_at", "created_by")
    list_filter = ("status", "department")
    search_fields = ("department", "items__product_name")
    ordering = ("-created_at",)
    readonly_fields = ("department", "status", "created_at", "processed_at", "created_by", "processed_by")
    inlines = [RequisitionItemInline]

    def has_add_permission(self, request):
        return False
