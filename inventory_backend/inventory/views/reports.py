# inventory/views/reports.py

"""
PATH: inventory/views/reports.py

INVENTORY REPORTS (READ-ONLY)

- summary:      status counts, today's entradas/salidas, top moved products
- stock-status: products in one status bucket (optimo | bajo | agotado)
- forecast:     products closest to running out at the observed salida rate
- reorder:      suggested purchase quantities for products at/below min_stock
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from inventory.models import Product
from inventory.serializers import ProductSerializer
from inventory.services import analytics
from inventory.services.errors import format_quantity
from inventory.views.errors import error_response
from permissions.roles import CAP_INVENTORY_VIEW, HasCapability


def _parse_report_date(date_str: str | None):
    """
    Accepts YYYY-MM-DD.
    Defaults to today (server timezone).
    """
    if not date_str:
        return timezone.localdate()

    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        return None


def _qty(x) -> str:
    """JSON-safe quantity string."""
    return format_quantity(x if x is not None else Decimal("0"))


def _product_ref(p: Product) -> dict:
    return {"id": str(p.pk), "name": p.name, "unit": p.unit, "category": p.category}


class _ReportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW


class InventorySummaryView(_ReportView):
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="date",
                type=OpenApiTypes.DATE,
                required=False,
                description="Day for entrada/salida totals, YYYY-MM-DD. Defaults to today.",
            )
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        d = _parse_report_date(request.query_params.get("date"))
        if d is None:
            return error_response(
                code="INVALID_DATE",
                message="Formato de fecha inválido. Usa AAAA-MM-DD.",
                http_status=400,
            )

        summary = analytics.inventory_summary(d)
        today = summary["today"]

        return Response(
            {
                "total_products": summary["total_products"],
                "stock_status": summary["stock_status"],
                "daily": {
                    "date": str(today["date"]),
                    "entradas": _qty(today["entradas"]),
                    "salidas": _qty(today["salidas"]),
                },
                "top_moved": [
                    {**_product_ref(p), "movement_count": p.movement_count}
                    for p in summary["top_moved"]
                ],
            }
        )


class StockStatusView(_ReportView):
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                required=False,
                description="optimo | bajo | agotado. Omit for counts only.",
            )
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        status_param = (request.query_params.get("status") or "").strip().lower()
        counts = analytics.stock_status_counts()

        if not status_param:
            return Response({"counts": counts})

        if status_param not in Product.StockStatus.values:
            return error_response(
                code="INVALID_STATUS",
                message="Estado inválido. Usa optimo, bajo o agotado.",
                http_status=400,
            )

        products = analytics.products_by_status(status_param).order_by("name")
        return Response(
            {
                "counts": counts,
                "status": status_param,
                "products": ProductSerializer(products, many=True).data,
            }
        )


class ConsumptionForecastView(_ReportView):
    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        forecasts = analytics.consumption_forecast()
        return Response(
            {
                "results": [
                    {
                        **_product_ref(f.product),
                        "quantity": _qty(f.product.quantity),
                        "daily_consumption": _qty(
                            f.daily_consumption.quantize(Decimal("0.001"))
                        ),
                        "days_remaining": int(f.days_remaining),
                    }
                    for f in forecasts
                ]
            }
        )


class ReorderRecommendationView(_ReportView):
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="category",
                type=OpenApiTypes.STR,
                required=False,
                description="Restrict to one category (Carnes, Verduras, Despensa, Licores...).",
            )
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        category = (request.query_params.get("category") or "").strip() or None
        rows = analytics.reorder_recommendations(category)

        if not rows:
            label = category or "todas las categorías"
            message = f"No hay productos con bajo stock para {label}."
        else:
            message = f"{len(rows)} recomendaciones generadas."

        return Response(
            {
                "message": message,
                "results": [
                    {
                        **_product_ref(row["product"]),
                        "current_quantity": _qty(row["product"].quantity),
                        "min_stock": _qty(row["product"].min_stock),
                        "recommended_quantity": _qty(row["quantity"]),
                    }
                    for row in rows
                ],
            }
        )
