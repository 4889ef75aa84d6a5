"""
PATH: inventory/models/__init__.py

Inventory models export surface.
"""

from .product import Product, product_name_key
from .stock_movement import StockMovement

__all__ = [
    "Product",
    "StockMovement",
    "product_name_key",
]
