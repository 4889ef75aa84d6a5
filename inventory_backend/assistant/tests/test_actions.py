# assistant/tests/test_actions.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from assistant.services import UnknownActionError, execute_action
from inventory.models import Product
from inventory.services import create_product
from inventory.services.errors import InsufficientStockError, NotFoundError
from permissions.roles import ROLE_ALMACENISTA, ROLE_JEFE
from purchases.models import Invoice
from requisitions.models import Requisition

User = get_user_model()


class ExecuteActionTests(TestCase):
    def setUp(self):
        self.ron = create_product(name="Ron Cacique", initial_quantity=12, unit="botellas", min_stock=3)

    def test_add_stock(self):
        result = execute_action(
            name="add_stock",
            args={"productName": "ron cacique", "quantity": 6, "unit": "botellas"},
        )

        self.ron.refresh_from_db()
        self.assertEqual(self.ron.quantity, Decimal("18.000"))
        self.assertEqual(result.message, "Entrada registrada: 6 botellas de Ron Cacique.")
        movement = self.ron.movements.order_by("-sequence").first()
        self.assertEqual(movement.source, "chatbot_entrada")

    def test_remove_stock_uses_destination(self):
        execute_action(
            name="remove_stock",
            args={"productName": "Ron Cacique", "quantity": 2, "unit": "botellas", "destination": "Barra"},
        )

        movement = self.ron.movements.order_by("-sequence").first()
        self.assertEqual(movement.destination, "Barra")
        self.assertEqual(Product.objects.get(pk=self.ron.pk).quantity, Decimal("10.000"))

    def test_remove_stock_default_tag(self):
        execute_action(
            name="remove_stock",
            args={"product_name": "Ron Cacique", "quantity": 1},
        )

        movement = self.ron.movements.order_by("-sequence").first()
        self.assertEqual(movement.destination, "salida_chatbot")
        self.assertEqual(movement.unit, "botellas")

    def test_remove_stock_insufficient(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            execute_action(
                name="remove_stock",
                args={"productName": "Ron Cacique", "quantity": 15, "unit": "botellas"},
            )

        self.assertEqual(ctx.exception.message, 'Stock insuficiente para "Ron Cacique". Quedan 12.')
        self.assertEqual(Product.objects.get(pk=self.ron.pk).quantity, Decimal("12.000"))

    def test_unknown_product(self):
        with self.assertRaises(NotFoundError) as ctx:
            execute_action(name="add_stock", args={"productName": "Pulpo", "quantity": 1})
        self.assertEqual(ctx.exception.message, 'Producto "Pulpo" no encontrado.')

    def test_create_invoice(self):
        result = execute_action(
            name="create_invoice",
            args={
                "provider": "Licores del Centro",
                "invoiceNumber": "A-77",
                "totalAmount": 120,
                "items": [{"productName": "Ron Cacique", "quantity": 6, "unit": "botellas", "price": 20}],
            },
        )

        invoice = Invoice.objects.get()
        self.assertEqual(invoice.source, Invoice.SOURCE_ASSISTANT)
        self.assertEqual(invoice.status, Invoice.STATUS_PENDING)
        self.assertEqual(result.message, "Factura #A-77 para Licores del Centro creada.")
        self.assertEqual(Product.objects.get(pk=self.ron.pk).quantity, Decimal("12.000"))

    def test_create_requisition(self):
        result = execute_action(
            name="create_requisition",
            args={
                "department": "Barra",
                "items": [{"productName": "Ron Cacique", "quantity": 2, "unit": "botellas"}],
            },
        )

        requisition = Requisition.objects.get()
        self.assertEqual(requisition.department, "Barra")
        self.assertEqual(requisition.items.get().product_id, self.ron.pk)
        self.assertEqual(result.message, "Requisición para Barra creada.")

    def test_unknown_action(self):
        with self.assertRaises(UnknownActionError) as ctx:
            execute_action(name="delete_everything", args={})
        self.assertEqual(
            ctx.exception.message, 'Acción "delete_everything" desconocida o no implementada.'
        )


class AssistantEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.jefe = User.objects.create_user(
            email="jefe@example.com", password="password123", role=ROLE_JEFE
        )
        self.almacenista = User.objects.create_user(
            email="almacen@example.com", password="password123", role=ROLE_ALMACENISTA
        )
        create_product(name="Tomate", initial_quantity="15.5", unit="kg", min_stock=4)

    def test_add_stock_via_api(self):
        self.client.force_authenticate(self.jefe)

        response = self.client.post(
            "/api/assistant/actions/",
            {"name": "add_stock", "args": {"productName": "Tomate", "quantity": "4.5", "unit": "kg"}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Entrada registrada: 4.5 kg de Tomate.")
        self.assertEqual(Product.objects.get(name="Tomate").quantity, Decimal("20.000"))

    def test_storekeeper_cannot_add_stock_through_assistant(self):
        self.client.force_authenticate(self.almacenista)

        response = self.client.post(
            "/api/assistant/actions/",
            {"name": "add_stock", "args": {"productName": "Tomate", "quantity": 1, "unit": "kg"}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["code"], "OPERATION_NOT_PERMITTED")

    def test_unknown_action_returns_400(self):
        self.client.force_authenticate(self.jefe)

        response = self.client.post(
            "/api/assistant/actions/", {"name": "fly", "args": {}}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "UNKNOWN_ACTION")
