# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    InvoiceListCreateView,
    InvoiceStatusView,
    ProviderListCreateView,
)

urlpatterns = [
    path("providers/", ProviderListCreateView.as_view(), name="purchase-providers"),
    path("invoices/", InvoiceListCreateView.as_view(), name="purchase-invoices"),
    path(
        "invoices/<uuid:invoice_id>/status/",
        InvoiceStatusView.as_view(),
        name="purchase-invoice-status",
    ),
]
