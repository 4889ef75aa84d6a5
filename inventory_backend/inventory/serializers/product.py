# inventory/serializers/product.py

"""
PRODUCT SERIALIZERS

- ProductSerializer: read shape (quantity is service-managed, never written here)
- ProductCreateSerializer: request shape for create; numeric leniency
  (invalid quantity -> 0, invalid min_stock -> default) lives in the service
- QuickUpdateSerializer: signed amount + optional unit/tag
"""

from rest_framework import serializers

from inventory.models import Product


class ProductSerializer(serializers.ModelSerializer):
    stock_status = serializers.CharField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "quantity",
            "unit",
            "min_stock",
            "category",
            "stock_status",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "name",
            "quantity",
            "unit",
            "min_stock",
            "category",
            "created_at",
            "updated_at",
        ]


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    unit = serializers.CharField(max_length=32)
    quantity = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    min_stock = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category = serializers.CharField(
        max_length=64, required=False, allow_blank=True, default=""
    )

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("El nombre del producto es obligatorio.")
        return value


class QuickUpdateSerializer(serializers.Serializer):
    amount = serializers.CharField()
    unit = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    tag = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
