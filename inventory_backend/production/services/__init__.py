from .production_service import ProductionResult, create_production

__all__ = [
    "ProductionResult",
    "create_production",
]
