from django.contrib import admin

from purchases.models import Invoice, InvoiceItem, Provider


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "provider", "date", "total_amount", "status", "source")
    list_filter = ("status", "source")
    search_fields = ("invoice_number", "provider")
    ordering = ("-date",)
    inlines = [InvoiceItemInline]


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "use_count", "last_used")
    search_fields = ("name", "phone")
    ordering = ("-last_used",)
