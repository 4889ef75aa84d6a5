from .production import Production, ProductionOutput

__all__ = [
    "Production",
    "ProductionOutput",
]
