# requisitions/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from inventory.services import create_product
from permissions.roles import ROLE_ALMACENISTA
from requisitions.models import Requisition

User = get_user_model()


class RequisitionEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="almacen@example.com", password="password123", role=ROLE_ALMACENISTA
        )
        self.client.force_authenticate(self.user)
        self.tomate = create_product(name="Tomate", initial_quantity="15.5", unit="kg", min_stock=4)

    def _create(self):
        return self.client.post(
            "/api/requisitions/",
            {"department": "Cocina", "items": [{"product_name": "Tomate", "quantity": "2"}]},
            format="json",
        )

    def test_create_and_list(self):
        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Requisición creada con éxito.")
        self.assertEqual(response.data["requisition"]["status"], "pending")
        self.assertEqual(response.data["requisition"]["created_by_email"], "almacen@example.com")

        listing = self.client.get("/api/requisitions/", {"status": "pending"})
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(len(listing.data), 1)

    def test_create_unknown_product_returns_404(self):
        response = self.client.post(
            "/api/requisitions/",
            {"department": "Cocina", "items": [{"product_name": "Pulpo", "quantity": "1"}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "NOT_FOUND")

    def test_process(self):
        requisition_id = self._create().data["requisition"]["id"]

        response = self.client.post(
            f"/api/requisitions/{requisition_id}/process/",
            {"deliveries": {str(self.tomate.pk): {"deliveredQuantity": "2", "observation": ""}}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Requisición procesada y stock actualizado.")
        self.assertEqual(response.data["requisition"]["status"], "completed")
        self.assertEqual(response.data["movements"][0]["destination"], "Cocina")
        self.tomate.refresh_from_db()
        self.assertEqual(self.tomate.quantity, Decimal("13.500"))

        again = self.client.post(
            f"/api/requisitions/{requisition_id}/process/",
            {"deliveries": {str(self.tomate.pk): {"deliveredQuantity": "2"}}},
            format="json",
        )
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(again.data["error"]["code"], "INVALID_REQUISITION_STATE")

    def test_process_insufficient_stock_returns_409(self):
        requisition_id = self._create().data["requisition"]["id"]

        response = self.client.post(
            f"/api/requisitions/{requisition_id}/process/",
            {"deliveries": {str(self.tomate.pk): {"delivered_quantity": "20"}}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.assertTrue(Requisition.objects.filter(pk=requisition_id, status="pending").exists())

    def test_departments_come_from_settings(self):
        with self.settings(INVENTORY_DEPARTMENTS=["Cocina", "Barra"]):
            response = self.client.get("/api/requisitions/departments/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"departments": ["Cocina", "Barra"]})
