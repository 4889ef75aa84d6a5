# inventory/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Product list / detail / create / delete
- Quick update (signed entrada/salida)
- Movement history + reversal (anulación)

Capability map:
- list/retrieve -> inventory.view
- create        -> inventory.edit
- destroy       -> inventory.delete
- adjust        -> inventory.edit or inventory.adjust (sign decides in the service)
- movements     -> inventory.history
- cancel        -> inventory.adjust
"""

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.models import Product
from inventory.serializers import (
    ProductCreateSerializer,
    ProductSerializer,
    QuickUpdateSerializer,
    StockMovementSerializer,
)
from inventory.services import (
    cancel_movement,
    create_product,
    delete_product,
    quick_update,
)
from inventory.services.analytics import products_by_status
from inventory.services.errors import LedgerError
from inventory.views.errors import ledger_error_response
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_HISTORY,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
    HasCapability,
    effective_capabilities_for,
)


class ProductViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Products have no generic update: quantity only changes through
    movements (adjust / requisitions / production / cancel).
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]

    required_capability = None

    ACTION_CAPABILITIES = {
        "list": CAP_INVENTORY_VIEW,
        "retrieve": CAP_INVENTORY_VIEW,
        "create": CAP_INVENTORY_EDIT,
        "destroy": CAP_INVENTORY_DELETE,
        "movements": CAP_INVENTORY_HISTORY,
        "cancel": CAP_INVENTORY_ADJUST,
    }

    def get_permissions(self):
        if self.action == "adjust":
            self.required_any_capabilities = {CAP_INVENTORY_EDIT, CAP_INVENTORY_ADJUST}
            return [IsAuthenticated(), HasAnyCapability()]

        self.required_capability = self.ACTION_CAPABILITIES.get(
            self.action, CAP_INVENTORY_VIEW
        )
        return [IsAuthenticated(), HasCapability()]

    def get_serializer_class(self):
        if self.action == "create":
            return ProductCreateSerializer
        if self.action == "adjust":
            return QuickUpdateSerializer
        if self.action == "movements":
            return StockMovementSerializer
        return ProductSerializer

    def get_queryset(self):
        qs = Product.objects.all()
        params = self.request.query_params

        category = (params.get("category") or "").strip()
        if category:
            qs = qs.filter(category__iexact=category)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(name__icontains=q)

        stock_status = (params.get("status") or "").strip().lower()
        if stock_status:
            qs = products_by_status(stock_status, queryset=qs)

        return qs.order_by("name")

    def _capabilities(self):
        return effective_capabilities_for(self.request, self.request.user)

    @extend_schema(
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, required=False),
            OpenApiParameter("q", OpenApiTypes.STR, required=False),
            OpenApiParameter(
                "status",
                OpenApiTypes.STR,
                required=False,
                description="optimo | bajo | agotado",
            ),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------
    @extend_schema(request=ProductCreateSerializer, responses={201: ProductSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ProductCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            product = create_product(
                name=data["name"],
                unit=data["unit"],
                initial_quantity=data.get("quantity"),
                min_stock=data.get("min_stock"),
                category=data.get("category", ""),
                user=request.user,
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {
                "product": ProductSerializer(product).data,
                "message": f'Producto "{product.name}" añadido.',
            },
            status=status.HTTP_201_CREATED,
        )

    # --------------------------------------------------
    # DELETE (hard delete, history included)
    # --------------------------------------------------
    def destroy(self, request, *args, **kwargs):
        try:
            delete_product(product_id=kwargs.get("pk"), capabilities=self._capabilities())
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # --------------------------------------------------
    # QUICK UPDATE
    # --------------------------------------------------
    @extend_schema(request=QuickUpdateSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        serializer = QuickUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = quick_update(
                product_id=pk,
                amount=data["amount"],
                unit=data.get("unit", ""),
                tag=data.get("tag") or "ajuste_manual",
                user=request.user,
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {
                "product": ProductSerializer(result.product).data,
                "movement": StockMovementSerializer(result.movement).data,
                "message": result.message,
                "notify": result.notify,
            },
            status=status.HTTP_200_OK,
        )

    # --------------------------------------------------
    # HISTORY
    # --------------------------------------------------
    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        product = self.get_object()
        rows = product.movements.select_related("performed_by").order_by("date", "sequence")
        return Response(StockMovementSerializer(rows, many=True).data)

    # --------------------------------------------------
    # REVERSAL
    # --------------------------------------------------
    @extend_schema(request=None, responses={200: OpenApiTypes.OBJECT})
    @action(
        detail=True,
        methods=["post"],
        url_path=r"movements/(?P<movement_id>[^/.]+)/cancel",
    )
    def cancel(self, request, pk=None, movement_id=None):
        try:
            result = cancel_movement(
                product_id=pk,
                movement_id=movement_id,
                user=request.user,
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {
                "product": ProductSerializer(result.product).data,
                "original": StockMovementSerializer(result.original).data,
                "reversal": StockMovementSerializer(result.reversal).data,
                "message": result.message,
            },
            status=status.HTTP_200_OK,
        )
