# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import Invoice, InvoiceItem, Provider


class ProviderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Provider
        fields = ("id", "name", "phone", "last_used", "use_count")
        read_only_fields = ("id", "last_used", "use_count")


class ProviderSaveSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    phone = serializers.CharField(max_length=50)


class InvoiceItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)

    class Meta:
        model = InvoiceItem
        fields = ("id", "product_name", "quantity", "unit", "price", "line_total")
        read_only_fields = ("id", "product_name", "quantity", "unit", "price")


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = (
            "id",
            "invoice_number",
            "provider",
            "date",
            "total_amount",
            "status",
            "source",
            "raw_text",
            "items",
            "created_at",
        )
        read_only_fields = (
            "id",
            "invoice_number",
            "provider",
            "date",
            "total_amount",
            "status",
            "source",
            "raw_text",
            "created_at",
        )


class InvoiceItemCreateSerializer(serializers.Serializer):
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.CharField()
    unit = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    price = serializers.CharField(required=False, default="0")


class InvoiceCreateSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=64)
    provider = serializers.CharField(max_length=200)
    total_amount = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=Invoice.STATUSES, default=Invoice.STATUS_PENDING)
    source = serializers.ChoiceField(choices=Invoice.SOURCES, default=Invoice.SOURCE_MANUAL)
    raw_text = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateTimeField(required=False, allow_null=True)
    items = InvoiceItemCreateSerializer(many=True, required=False, default=list)


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Invoice.STATUSES)
