# production/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.serializers import ProductSerializer, StockMovementSerializer
from inventory.services.errors import LedgerError
from inventory.views.errors import ledger_error_response
from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_PRODUCTION_CREATE,
    HasCapability,
    effective_capabilities_for,
)
from production.models import Production
from production.serializers import ProductionCreateSerializer, ProductionSerializer
from production.services import create_production


class ProductionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Production runs are append-only: no update, no delete.
    """

    serializer_class = ProductionSerializer
    permission_classes = [IsAuthenticated, HasCapability]

    required_capability = None

    def get_permissions(self):
        if self.action == "create":
            self.required_capability = CAP_PRODUCTION_CREATE
        else:
            self.required_capability = CAP_INVENTORY_VIEW
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        return (
            Production.objects.select_related("created_by")
            .prefetch_related("outputs")
            .order_by("-date")
        )

    @extend_schema(request=ProductionCreateSerializer, responses={201: ProductionSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ProductionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = create_production(
                raw_material_id=data["raw_material_id"],
                quantity_used=data["quantity_used"],
                outputs=data["outputs"],
                waste=data.get("waste"),
                notes=data.get("notes", ""),
                user=request.user,
                capabilities=effective_capabilities_for(request, request.user),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        production = self.get_queryset().get(pk=result.production.pk)
        return Response(
            {
                "production": ProductionSerializer(production).data,
                "movements": StockMovementSerializer(result.movements, many=True).data,
                "created_products": ProductSerializer(result.created_products, many=True).data,
                "message": result.message,
            },
            status=status.HTTP_201_CREATED,
        )
