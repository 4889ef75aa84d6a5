# purchases/api/views.py

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.services.errors import LedgerError
from inventory.views.errors import ledger_error_response
from permissions.roles import CAP_PURCHASES_MANAGE, HasCapability, effective_capabilities_for
from purchases.api.serializers import (
    InvoiceCreateSerializer,
    InvoiceSerializer,
    InvoiceStatusSerializer,
    ProviderSaveSerializer,
    ProviderSerializer,
)
from purchases.models import Invoice
from purchases.services import (
    create_invoice,
    recent_providers,
    save_or_update_provider,
    update_invoice_status,
)


class _PurchasesView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PURCHASES_MANAGE

    def _capabilities(self):
        return effective_capabilities_for(self.request, self.request.user)


class ProviderListCreateView(_PurchasesView):
    @extend_schema(tags=["purchases"], responses=ProviderSerializer(many=True))
    def get(self, request):
        return Response(
            ProviderSerializer(recent_providers(), many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=ProviderSaveSerializer,
        responses={200: ProviderSerializer, 201: ProviderSerializer},
    )
    def post(self, request):
        s = ProviderSaveSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            provider, created = save_or_update_provider(
                name=s.validated_data["name"],
                phone=s.validated_data["phone"],
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            ProviderSerializer(provider).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class InvoiceListCreateView(_PurchasesView):
    @extend_schema(
        tags=["purchases"],
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, required=False, description="pending | paid"),
        ],
        responses=InvoiceSerializer(many=True),
    )
    def get(self, request):
        qs = Invoice.objects.prefetch_related("items").order_by("-date")

        invoice_status = (request.query_params.get("status") or "").strip().lower()
        if invoice_status:
            qs = qs.filter(status=invoice_status)

        return Response(InvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=InvoiceCreateSerializer,
        responses={201: InvoiceSerializer},
    )
    def post(self, request):
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = create_invoice(
                invoice_number=data["invoice_number"],
                provider=data["provider"],
                total_amount=data.get("total_amount"),
                items=data.get("items") or [],
                status=data["status"],
                source=data["source"],
                raw_text=data.get("raw_text", ""),
                date=data.get("date"),
                user=request.user,
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {"invoice": InvoiceSerializer(result.invoice).data, "message": result.message},
            status=status.HTTP_201_CREATED,
        )


class InvoiceStatusView(_PurchasesView):
    @extend_schema(
        tags=["purchases"],
        request=InvoiceStatusSerializer,
        responses={200: InvoiceSerializer},
    )
    def post(self, request, invoice_id):
        s = InvoiceStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = update_invoice_status(
                invoice_id=invoice_id,
                status=s.validated_data["status"],
                capabilities=self._capabilities(),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {"invoice": InvoiceSerializer(result.invoice).data, "message": result.message},
            status=status.HTTP_200_OK,
        )
