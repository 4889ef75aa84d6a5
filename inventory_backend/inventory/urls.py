# inventory/urls.py

"""
INVENTORY URLS

Mounted under /api/inventory/:
    products/                                       list / create
    products/<id>/                                  retrieve / delete
    products/<id>/adjust/                           quick update
    products/<id>/movements/                        history
    products/<id>/movements/<movement_id>/cancel/   anulación
    reports/summary|stock-status|forecast|reorder/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.views import (
    ConsumptionForecastView,
    InventorySummaryView,
    ProductViewSet,
    ReorderRecommendationView,
    StockStatusView,
)

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
    path("reports/summary/", InventorySummaryView.as_view(), name="inventory-summary"),
    path("reports/stock-status/", StockStatusView.as_view(), name="inventory-stock-status"),
    path("reports/forecast/", ConsumptionForecastView.as_view(), name="inventory-forecast"),
    path("reports/reorder/", ReorderRecommendationView.as_view(), name="inventory-reorder"),
]
