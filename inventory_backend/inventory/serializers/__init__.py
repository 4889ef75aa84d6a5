# inventory/serializers/__init__.py

from .movement import StockMovementSerializer
from .product import ProductCreateSerializer, ProductSerializer, QuickUpdateSerializer

__all__ = [
    "ProductSerializer",
    "ProductCreateSerializer",
    "QuickUpdateSerializer",
    "StockMovementSerializer",
]
