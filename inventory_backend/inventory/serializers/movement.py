# inventory/serializers/movement.py

from rest_framework import serializers

from inventory.models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    performed_by_email = serializers.EmailField(
        source="performed_by.email", read_only=True, default=None
    )

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "movement_type",
            "amount",
            "unit",
            "date",
            "sequence",
            "source",
            "destination",
            "cancelled",
            "cancelled_movement",
            "cancelled_movement_date",
            "performed_by_email",
        ]
