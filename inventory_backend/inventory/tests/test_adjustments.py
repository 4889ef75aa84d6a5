# inventory/tests/test_adjustments.py

from decimal import Decimal

from django.test import TestCase

from inventory.services import create_product, quick_update
from inventory.services.errors import (
    InsufficientStockError,
    LedgerValidationError,
    OperationNotPermittedError,
)
from permissions.roles import ROLE_ALMACENISTA, ROLE_JEFE, capabilities_for_role


class QuickUpdateTests(TestCase):
    def setUp(self):
        self.product = create_product(
            name="Refresco 2L", initial_quantity=50, unit="botellas", min_stock=15
        )

    def test_manual_entrada_is_silent(self):
        result = quick_update(product_id=self.product.pk, amount=10)

        self.assertEqual(result.product.quantity, Decimal("60"))
        self.assertEqual(result.movement.source, "ajuste_manual")
        self.assertEqual(result.message, 'Entrada registrada para "Refresco 2L".')
        self.assertFalse(result.notify)

    def test_tagged_salida_notifies(self):
        result = quick_update(product_id=self.product.pk, amount=-5, tag="Barra")

        self.assertEqual(result.product.quantity, Decimal("45"))
        self.assertEqual(result.movement.destination, "Barra")
        self.assertEqual(result.message, 'Salida registrada para "Refresco 2L".')
        self.assertTrue(result.notify)

    def test_manual_entrada_variant_tag_is_silent(self):
        result = quick_update(
            product_id=self.product.pk, amount=1, tag="ajuste_manual_entrada"
        )
        self.assertFalse(result.notify)

    def test_zero_rejected(self):
        with self.assertRaises(LedgerValidationError):
            quick_update(product_id=self.product.pk, amount=0)

    def test_salida_beyond_stock_rejected(self):
        with self.assertRaises(InsufficientStockError):
            quick_update(product_id=self.product.pk, amount=-51)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, Decimal("50"))

    def test_storekeeper_cannot_add_but_can_remove(self):
        caps = capabilities_for_role(ROLE_ALMACENISTA)

        with self.assertRaises(OperationNotPermittedError):
            quick_update(product_id=self.product.pk, amount=5, capabilities=caps)

        result = quick_update(
            product_id=self.product.pk, amount=-5, tag="salida_manual", capabilities=caps
        )
        self.assertEqual(result.product.quantity, Decimal("45"))

    def test_jefe_can_add(self):
        result = quick_update(
            product_id=self.product.pk,
            amount="2.5",
            capabilities=capabilities_for_role(ROLE_JEFE),
        )
        self.assertEqual(result.product.quantity, Decimal("52.5"))
