# requisitions/views.py

"""
REQUISITION VIEWSET

- list/retrieve/create -> inventory.view
- departments          -> inventory.view (configured department names)
- process              -> requisitions.process
"""

from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.serializers import StockMovementSerializer
from inventory.services.errors import LedgerError
from inventory.views.errors import ledger_error_response
from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_REQUISITIONS_PROCESS,
    HasCapability,
    effective_capabilities_for,
)
from requisitions.models import Requisition
from requisitions.serializers import (
    RequisitionCreateSerializer,
    RequisitionProcessSerializer,
    RequisitionSerializer,
)
from requisitions.services import create_requisition, process_requisition


class RequisitionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = RequisitionSerializer
    permission_classes = [IsAuthenticated, HasCapability]

    required_capability = None

    def get_permissions(self):
        if self.action == "process":
            self.required_capability = CAP_REQUISITIONS_PROCESS
        else:
            self.required_capability = CAP_INVENTORY_VIEW
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = (
            Requisition.objects.select_related("created_by", "processed_by")
            .prefetch_related("items")
        )
        params = self.request.query_params

        req_status = (params.get("status") or "").strip().lower()
        if req_status:
            qs = qs.filter(status=req_status)

        department = (params.get("department") or "").strip()
        if department:
            qs = qs.filter(department__iexact=department)

        return qs.order_by("-created_at")

    def _capabilities(self):
        return effective_capabilities_for(self.request, self.request.user)

    @extend_schema(
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, required=False, description="pending | completed"),
            OpenApiParameter("department", OpenApiTypes.STR, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=RequisitionCreateSerializer, responses={201: RequisitionSerializer})
    def create(self, request, *args, **kwargs):
        serializer = RequisitionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            requisition = create_requisition(
                department=data["department"],
                items=data["items"],
                user=request.user,
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {
                "requisition": RequisitionSerializer(requisition).data,
                "message": "Requisición creada con éxito.",
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["get"], url_path="departments")
    def departments(self, request):
        return Response({"departments": list(getattr(settings, "INVENTORY_DEPARTMENTS", []))})

    @extend_schema(request=RequisitionProcessSerializer, responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["post"], url_path="process")
    def process(self, request, pk=None):
        serializer = RequisitionProcessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = process_requisition(
                requisition_id=pk,
                deliveries=serializer.validated_data["deliveries"],
                user=request.user,
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        requisition = self.get_queryset().get(pk=result.requisition.pk)
        return Response(
            {
                "requisition": RequisitionSerializer(requisition).data,
                "movements": StockMovementSerializer(result.movements, many=True).data,
                "message": result.message,
            },
            status=status.HTTP_200_OK,
        )
