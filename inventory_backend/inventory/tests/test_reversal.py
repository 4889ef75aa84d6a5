# inventory/tests/test_reversal.py

from decimal import Decimal

from django.test import TestCase

from inventory.models import StockMovement
from inventory.services import apply_signed_movement, cancel_movement, create_product
from inventory.services.errors import (
    InsufficientStockError,
    MovementNotReversibleError,
    NotFoundError,
    OperationNotPermittedError,
)
from permissions.roles import ROLE_ALMACENISTA, ROLE_INVENTARIO, capabilities_for_role


class CancelMovementTests(TestCase):
    """
    Anulación:
    - original kept, flagged cancelled
    - compensating anulacion_<type> appended
    - never below zero, never twice
    """

    def setUp(self):
        self.product = create_product(name="Solomo", initial_quantity=6, unit="kg")
        self.entrada = apply_signed_movement(
            product=self.product, signed_amount=4, reason_tag="ajuste_manual_entrada"
        ).movement

    def test_cancel_entrada_restores_previous_quantity(self):
        result = cancel_movement(product_id=self.product.pk, movement_id=self.entrada.pk)

        self.assertEqual(result.product.quantity, Decimal("6"))
        self.assertEqual(result.message, "Movimiento anulado con éxito.")

        original = StockMovement.objects.get(pk=self.entrada.pk)
        self.assertTrue(original.cancelled)

        reversal = result.reversal
        self.assertEqual(reversal.movement_type, StockMovement.MovementType.ANULACION_ENTRADA)
        self.assertEqual(reversal.amount, Decimal("4"))
        self.assertEqual(reversal.cancelled_movement_id, self.entrada.pk)
        self.assertEqual(reversal.cancelled_movement_date, self.entrada.date)
        self.assertEqual(reversal.source, "anulacion_manual")

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, self.product.ledger_balance())

    def test_second_cancel_fails(self):
        cancel_movement(product_id=self.product.pk, movement_id=self.entrada.pk)

        with self.assertRaises(MovementNotReversibleError):
            cancel_movement(product_id=self.product.pk, movement_id=self.entrada.pk)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, Decimal("6"))
        self.assertEqual(self.product.movements.count(), 3)

    def test_reversal_record_cannot_be_reversed(self):
        result = cancel_movement(product_id=self.product.pk, movement_id=self.entrada.pk)
        with self.assertRaises(MovementNotReversibleError):
            cancel_movement(product_id=self.product.pk, movement_id=result.reversal.pk)

    def test_cancel_salida_adds_stock_back(self):
        salida = apply_signed_movement(
            product=self.product, signed_amount=-3, reason_tag="Cocina"
        ).movement

        result = cancel_movement(product_id=self.product.pk, movement_id=salida.pk)

        self.assertEqual(result.product.quantity, Decimal("10"))
        self.assertEqual(
            result.reversal.movement_type, StockMovement.MovementType.ANULACION_SALIDA
        )

    def test_stock_floor_blocks_cancel(self):
        product = create_product(name="Chorizo", initial_quantity=0, unit="kg")
        entrada = apply_signed_movement(product=product, signed_amount=5).movement
        apply_signed_movement(product=product, signed_amount=-3, reason_tag="Cocina")

        with self.assertRaises(InsufficientStockError) as ctx:
            cancel_movement(product_id=product.pk, movement_id=entrada.pk)

        self.assertIn("stock negativo (-3)", ctx.exception.message)

        product.refresh_from_db()
        self.assertEqual(product.quantity, Decimal("2"))
        entrada.refresh_from_db()
        self.assertFalse(entrada.cancelled)
        self.assertEqual(product.movements.count(), 3)

    def test_movement_must_belong_to_product(self):
        other = create_product(name="Lomito", initial_quantity=5, unit="kg")
        with self.assertRaises(NotFoundError):
            cancel_movement(product_id=other.pk, movement_id=self.entrada.pk)

    def test_requires_adjust_capability(self):
        with self.assertRaises(OperationNotPermittedError):
            cancel_movement(
                product_id=self.product.pk,
                movement_id=self.entrada.pk,
                capabilities=capabilities_for_role(ROLE_ALMACENISTA),
            )

        result = cancel_movement(
            product_id=self.product.pk,
            movement_id=self.entrada.pk,
            capabilities=capabilities_for_role(ROLE_INVENTARIO),
        )
        self.assertEqual(result.product.quantity, Decimal("6"))
