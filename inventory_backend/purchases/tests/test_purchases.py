# purchases/tests/test_purchases.py

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from inventory.models import Product
from inventory.services.errors import LedgerValidationError, NotFoundError, OperationNotPermittedError
from permissions.roles import CAP_INVENTORY_VIEW, ROLE_ALMACENISTA
from purchases.models import Invoice, Provider
from purchases.services import (
    create_invoice,
    recent_providers,
    save_or_update_provider,
    update_invoice_status,
)

User = get_user_model()


class InvoiceServiceTests(TestCase):
    def test_create_invoice_with_lines(self):
        result = create_invoice(
            invoice_number="FC-002",
            provider="Verduras Frescas C.A.",
            total_amount="75.50",
            source=Invoice.SOURCE_WHATSAPP,
            raw_text="Factura de Verduras Frescas: 5 cestas de lechuga, 10kg tomate. Total 75.50",
            items=[
                {"product_name": "Lechuga", "quantity": 5, "unit": "cestas", "price": 50},
                {"product_name": "Tomate", "quantity": 10, "unit": "kg", "price": "25.50"},
            ],
        )

        invoice = result.invoice
        self.assertEqual(result.message, "Factura #FC-002 guardada con éxito.")
        self.assertEqual(invoice.status, Invoice.STATUS_PENDING)
        self.assertEqual(invoice.total_amount, Decimal("75.50"))
        self.assertEqual([i.product_name for i in invoice.items.all()], ["Lechuga", "Tomate"])

    def test_invoices_never_touch_stock(self):
        create_invoice(
            invoice_number="FC-003",
            provider="Carnicería El Toro",
            items=[{"product_name": "Lomito", "quantity": 10, "unit": "kg", "price": 5}],
        )
        self.assertFalse(Product.objects.exists())

    def test_total_defaults_to_sum_of_lines(self):
        result = create_invoice(
            invoice_number="FC-004",
            provider="Carnicería El Toro",
            items=[
                {"product_name": "Lomito", "quantity": "2", "price": "10.25"},
                {"product_name": "Solomo", "quantity": "1.5", "price": "4"},
            ],
        )
        self.assertEqual(result.invoice.total_amount, Decimal("26.50"))

    def test_validation(self):
        with self.assertRaises(LedgerValidationError):
            create_invoice(invoice_number=" ", provider="X")
        with self.assertRaises(LedgerValidationError):
            create_invoice(invoice_number="1", provider="")
        with self.assertRaises(LedgerValidationError):
            create_invoice(invoice_number="1", provider="X", total_amount="-1")
        with self.assertRaises(LedgerValidationError):
            create_invoice(invoice_number="1", provider="X", status="cancelled")
        self.assertFalse(Invoice.objects.exists())

    def test_status_toggle(self):
        invoice = create_invoice(invoice_number="FC-001", provider="El Toro").invoice

        result = update_invoice_status(invoice_id=invoice.pk, status=Invoice.STATUS_PAID)
        self.assertEqual(result.message, "Estado de la factura actualizado.")
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, Invoice.STATUS_PAID)

        update_invoice_status(invoice_id=invoice.pk, status=Invoice.STATUS_PENDING)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, Invoice.STATUS_PENDING)

    def test_status_update_unknown_invoice(self):
        with self.assertRaises(NotFoundError):
            update_invoice_status(invoice_id="missing", status=Invoice.STATUS_PAID)

    def test_requires_capability(self):
        with self.assertRaises(OperationNotPermittedError):
            create_invoice(invoice_number="1", provider="X", capabilities={CAP_INVENTORY_VIEW})


class ProviderServiceTests(TestCase):
    def test_new_provider_starts_at_one_use(self):
        provider, created = save_or_update_provider(name="El Toro", phone="584121234567")

        self.assertTrue(created)
        self.assertEqual(provider.use_count, 1)

    def test_save_is_logged_with_creation_flag(self):
        with self.assertLogs("purchases.services.provider_service", level="INFO") as logs:
            save_or_update_provider(name="Carnes SA", phone="555")
            save_or_update_provider(name="Carnes SA", phone="555")

        self.assertEqual([r.provider_created for r in logs.records], [True, False])
        self.assertEqual(Provider.objects.get().use_count, 2)

    def test_existing_phone_is_bumped_and_renamed(self):
        save_or_update_provider(name="El Toro", phone="584121234567")
        provider, created = save_or_update_provider(name="Carnicería El Toro", phone="584121234567")

        self.assertFalse(created)
        self.assertEqual(provider.use_count, 2)
        self.assertEqual(provider.name, "Carnicería El Toro")
        self.assertEqual(Provider.objects.count(), 1)

    def test_name_and_phone_required(self):
        with self.assertRaises(LedgerValidationError):
            save_or_update_provider(name="El Toro", phone="")
        with self.assertRaises(LedgerValidationError):
            save_or_update_provider(name="", phone="5841200")

    def test_recent_providers_are_the_last_five_used(self):
        start = timezone.now()
        for i in range(7):
            with mock.patch("inventory.services.clock.now", return_value=start + timedelta(minutes=i)):
                save_or_update_provider(name=f"Proveedor {i}", phone=f"58412000000{i}")

        names = [p.name for p in recent_providers()]
        self.assertEqual(names, ["Proveedor 6", "Proveedor 5", "Proveedor 4", "Proveedor 3", "Proveedor 2"])


class PurchasesEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="almacen@example.com", password="password123", role=ROLE_ALMACENISTA
        )
        self.client.force_authenticate(self.user)

    def test_invoice_create_list_and_status(self):
        response = self.client.post(
            "/api/purchases/invoices/",
            {
                "invoice_number": "FC-001",
                "provider": "Carnicería El Toro",
                "total_amount": "150.75",
                "items": [
                    {"product_name": "Carne de Parrilla (Punta)", "quantity": "10", "unit": "kg", "price": "15.075"},
                ],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Factura #FC-001 guardada con éxito.")
        invoice_id = response.data["invoice"]["id"]

        listing = self.client.get("/api/purchases/invoices/", {"status": "pending"})
        self.assertEqual(len(listing.data), 1)

        paid = self.client.post(
            f"/api/purchases/invoices/{invoice_id}/status/", {"status": "paid"}, format="json"
        )
        self.assertEqual(paid.status_code, status.HTTP_200_OK)
        self.assertEqual(paid.data["invoice"]["status"], "paid")

    def test_provider_save_or_update(self):
        first = self.client.post(
            "/api/purchases/providers/", {"name": "El Toro", "phone": "58412"}, format="json"
        )
        second = self.client.post(
            "/api/purchases/providers/", {"name": "El Toro", "phone": "58412"}, format="json"
        )

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data["use_count"], 2)

        listing = self.client.get("/api/purchases/providers/")
        self.assertEqual(len(listing.data), 1)
