# inventory/views/__init__.py

"""
Inventory views package exports.
"""

from .product import ProductViewSet
from .reports import (
    ConsumptionForecastView,
    InventorySummaryView,
    ReorderRecommendationView,
    StockStatusView,
)

__all__ = [
    "ProductViewSet",
    "InventorySummaryView",
    "StockStatusView",
    "ConsumptionForecastView",
    "ReorderRecommendationView",
]
