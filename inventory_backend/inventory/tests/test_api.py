# inventory/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from inventory.models import Product
from inventory.services import apply_signed_movement, create_product
from permissions.roles import ROLE_ALMACENISTA, ROLE_INVENTARIO, ROLE_JEFE

User = get_user_model()


class InventoryApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.jefe = User.objects.create_user(
            email="jefe@example.com", password="password123", role=ROLE_JEFE
        )
        self.inventario = User.objects.create_user(
            email="inventario@example.com", password="password123", role=ROLE_INVENTARIO
        )
        self.almacenista = User.objects.create_user(
            email="almacen@example.com", password="password123", role=ROLE_ALMACENISTA
        )
        self.tomate = create_product(
            name="Tomate", initial_quantity="15.5", unit="kg", min_stock=4, category="Verduras"
        )


class ProductEndpointTests(InventoryApiTestCase):
    def test_requires_authentication(self):
        response = self.client.get("/api/inventory/products/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_filters_by_category(self):
        create_product(name="Lomito", initial_quantity=15, unit="kg", category="Carnes")
        self.client.force_authenticate(self.almacenista)

        response = self.client.get("/api/inventory/products/", {"category": "verduras"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["name"] for p in response.data], ["Tomate"])
        self.assertEqual(response.data[0]["stock_status"], "optimo")

    def test_create_product(self):
        self.client.force_authenticate(self.almacenista)

        response = self.client.post(
            "/api/inventory/products/",
            {"name": "Ron Cacique", "unit": "botellas", "quantity": 12, "min_stock": 3, "category": "Licores"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], 'Producto "Ron Cacique" añadido.')
        product = Product.objects.get(name="Ron Cacique")
        self.assertEqual(product.quantity, Decimal("12"))
        self.assertEqual(product.movements.count(), 1)

    def test_create_duplicate_name_returns_canonical_error(self):
        self.client.force_authenticate(self.jefe)

        response = self.client.post(
            "/api/inventory/products/",
            {"name": "TOMATE", "unit": "kg", "quantity": 1},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_delete_requires_capability(self):
        self.client.force_authenticate(self.almacenista)
        response = self.client.delete(f"/api/inventory/products/{self.tomate.pk}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.inventario)
        response = self.client.delete(f"/api/inventory/products/{self.tomate.pk}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=self.tomate.pk).exists())


class AdjustEndpointTests(InventoryApiTestCase):
    def test_salida_with_destination(self):
        self.client.force_authenticate(self.almacenista)

        response = self.client.post(
            f"/api/inventory/products/{self.tomate.pk}/adjust/",
            {"amount": "-2", "tag": "Cocina"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["product"]["quantity"]), Decimal("13.5"))
        self.assertEqual(response.data["movement"]["destination"], "Cocina")
        self.assertTrue(response.data["notify"])

    def test_storekeeper_manual_entrada_forbidden(self):
        self.client.force_authenticate(self.almacenista)

        response = self.client.post(
            f"/api/inventory/products/{self.tomate.pk}/adjust/",
            {"amount": "5"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["code"], "OPERATION_NOT_PERMITTED")

    def test_insufficient_stock_is_conflict(self):
        self.client.force_authenticate(self.jefe)

        response = self.client.post(
            f"/api/inventory/products/{self.tomate.pk}/adjust/",
            {"amount": "-20"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.tomate.refresh_from_db()
        self.assertEqual(self.tomate.quantity, Decimal("15.5"))


class HistoryAndCancelEndpointTests(InventoryApiTestCase):
    def setUp(self):
        super().setUp()
        self.salida = apply_signed_movement(
            product=self.tomate, signed_amount=-2, reason_tag="Cocina"
        ).movement

    def test_history_sorted_and_gated(self):
        self.client.force_authenticate(self.almacenista)
        url = f"/api/inventory/products/{self.tomate.pk}/movements/"
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.inventario)
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m["sequence"] for m in response.data], [1, 2])
        self.assertEqual(response.data[1]["movement_type"], "salida")

    def test_cancel_and_cancel_again(self):
        self.client.force_authenticate(self.inventario)
        url = f"/api/inventory/products/{self.tomate.pk}/movements/{self.salida.pk}/cancel/"

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["product"]["quantity"]), Decimal("15.5"))
        self.assertTrue(response.data["original"]["cancelled"])
        self.assertEqual(response.data["reversal"]["movement_type"], "anulacion_salida")

        again = self.client.post(url)
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["error"]["code"], "MOVEMENT_NOT_REVERSIBLE")

    def test_cancel_unknown_movement(self):
        self.client.force_authenticate(self.jefe)
        url = (
            f"/api/inventory/products/{self.tomate.pk}/movements/"
            "00000000-0000-0000-0000-000000000000/cancel/"
        )
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ReportEndpointTests(InventoryApiTestCase):
    def test_summary(self):
        create_product(name="Lechuga", initial_quantity=0, unit="cestas", min_stock=2)
        self.client.force_authenticate(self.almacenista)

        response = self.client.get("/api/inventory/reports/summary/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_products"], 2)
        self.assertEqual(response.data["stock_status"]["agotado"], 1)
        self.assertEqual(response.data["daily"]["entradas"], "15.5")

    def test_summary_rejects_bad_date(self):
        self.client.force_authenticate(self.almacenista)
        response = self.client.get("/api/inventory/reports/summary/", {"date": "ayer"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reorder(self):
        create_product(name="Cebolla", initial_quantity=0, unit="sacos", min_stock=1, category="Verduras")
        self.client.force_authenticate(self.jefe)

        response = self.client.get("/api/inventory/reports/reorder/", {"category": "Verduras"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "1 recomendaciones generadas.")
        self.assertEqual(response.data["results"][0]["recommended_quantity"], "2")

    def test_stock_status_invalid(self):
        self.client.force_authenticate(self.jefe)
        response = self.client.get("/api/inventory/reports/stock-status/", {"status": "raro"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
