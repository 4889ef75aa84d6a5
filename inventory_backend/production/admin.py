from django.contrib import admin

from production.models import Production, ProductionOutput


class ProductionOutputInline(admin.TabularInline):
    model = ProductionOutput
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "quantity", "unit", "category")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Production)
class ProductionAdmin(admin.ModelAdmin):
    list_display = ("raw_material_name", "raw_material_quantity_used", "raw_material_unit", "date", "created_by")
    search_fields = ("raw_material_name", "outputs__product_name")
    ordering = ("-date",)
    inlines = [ProductionOutputInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
