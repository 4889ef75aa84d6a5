from .invoice_service import InvoiceResult, create_invoice, update_invoice_status
from .provider_service import recent_providers, save_or_update_provider

__all__ = [
    "InvoiceResult",
    "create_invoice",
    "recent_providers",
    "save_or_update_provider",
    "update_invoice_status",
]
