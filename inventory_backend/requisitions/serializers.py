# requisitions/serializers.py

from rest_framework import serializers

from requisitions.models import Requisition, RequisitionItem


class RequisitionItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = RequisitionItem
        fields = [
            "id",
            "product",
            "product_name",
            "requested_quantity",
            "unit",
            "delivered_quantity",
            "observation",
        ]
        read_only_fields = fields


class RequisitionSerializer(serializers.ModelSerializer):
    items = RequisitionItemSerializer(many=True, read_only=True)
    created_by_email = serializers.EmailField(
        source="created_by.email", read_only=True, default=None
    )
    processed_by_email = serializers.EmailField(
        source="processed_by.email", read_only=True, default=None
    )

    class Meta:
        model = Requisition
        fields = [
            "id",
            "department",
            "status",
            "items",
            "created_at",
            "processed_at",
            "created_by_email",
            "processed_by_email",
        ]
        read_only_fields = [
            "id",
            "department",
            "status",
            "created_at",
            "processed_at",
        ]


# --------------------------------------------------
# REQUEST SHAPES
# --------------------------------------------------

class RequisitionItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False, allow_null=True)
    product_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    quantity = serializers.CharField()
    unit = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("product_id") and not (attrs.get("product_name") or "").strip():
            raise serializers.ValidationError("Cada producto necesita product_id o product_name.")
        return attrs


class RequisitionCreateSerializer(serializers.Serializer):
    department = serializers.CharField(max_length=80)
    items = RequisitionItemInputSerializer(many=True, allow_empty=False)


class RequisitionProcessSerializer(serializers.Serializer):
    """
    deliveries: {"<product id>": {"delivered_quantity": "2", "observation": ""}}
    Numbers are validated in the service so the message names the item.
    """

    deliveries = serializers.DictField(child=serializers.DictField())
