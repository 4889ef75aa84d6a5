# production/serializers.py

from rest_framework import serializers

from production.models import Production, ProductionOutput


class ProductionOutputSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductionOutput
        fields = ["id", "product", "product_name", "quantity", "unit", "category"]
        read_only_fields = fields


class ProductionSerializer(serializers.ModelSerializer):
    outputs = ProductionOutputSerializer(many=True, read_only=True)
    created_by_email = serializers.EmailField(
        source="created_by.email", read_only=True, default=None
    )

    class Meta:
        model = Production
        fields = [
            "id",
            "date",
            "raw_material",
            "raw_material_name",
            "raw_material_unit",
            "raw_material_quantity_used",
            "waste_quantity",
            "waste_unit",
            "notes",
            "outputs",
            "created_by_email",
        ]
        read_only_fields = [
            "id",
            "date",
            "raw_material",
            "raw_material_name",
            "raw_material_unit",
            "raw_material_quantity_used",
            "waste_quantity",
            "waste_unit",
            "notes",
        ]


class ProductionOutputInputSerializer(serializers.Serializer):
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.CharField()
    unit = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class WasteInputSerializer(serializers.Serializer):
    quantity = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    unit = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class ProductionCreateSerializer(serializers.Serializer):
    raw_material_id = serializers.UUIDField()
    quantity_used = serializers.CharField()
    outputs = ProductionOutputInputSerializer(many=True, allow_empty=False)
    waste = WasteInputSerializer(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
