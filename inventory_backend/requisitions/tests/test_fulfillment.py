# requisitions/tests/test_fulfillment.py

from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from inventory.models import Product, StockMovement
from inventory.services import create_product, delete_product
from inventory.services.errors import (
    CommitFailureError,
    InsufficientStockError,
    InvalidRequisitionStateError,
    LedgerValidationError,
    NotFoundError,
    OperationNotPermittedError,
)
from permissions.roles import CAP_INVENTORY_VIEW, ROLE_ALMACENISTA, capabilities_for_role
from requisitions.models import Requisition
from requisitions.services import create_requisition, process_requisition


class RequisitionCreateTests(TestCase):
    def setUp(self):
        self.tomate = create_product(name="Tomate", initial_quantity="15.5", unit="kg", min_stock=4)

    def test_items_resolve_by_name_case_insensitively(self):
        requisition = create_requisition(
            department="Cocina",
            items=[{"product_name": "tomate", "quantity": "2"}],
        )

        item = requisition.items.get()
        self.assertEqual(requisition.status, Requisition.Status.PENDING)
        self.assertEqual(item.product_id, self.tomate.pk)
        self.assertEqual(item.product_name, "Tomate")
        self.assertEqual(item.requested_quantity, Decimal("2.000"))
        self.assertEqual(item.unit, "kg")

    def test_unknown_product_is_rejected(self):
        with self.assertRaises(NotFoundError) as ctx:
            create_requisition(
                department="Cocina",
                items=[{"product_name": "Pulpo", "quantity": "1"}],
            )

        self.assertEqual(ctx.exception.message, "Producto no encontrado: Pulpo")
        self.assertFalse(Requisition.objects.exists())

    def test_department_and_items_required(self):
        with self.assertRaises(LedgerValidationError):
            create_requisition(department=" ", items=[{"product_name": "Tomate", "quantity": 1}])
        with self.assertRaises(LedgerValidationError):
            create_requisition(department="Cocina", items=[])

    def test_requested_quantity_must_be_positive(self):
        with self.assertRaises(LedgerValidationError):
            create_requisition(
                department="Cocina",
                items=[{"product_name": "Tomate", "quantity": "0"}],
            )


class ProcessRequisitionTests(TestCase):
    def setUp(self):
        self.tomate = create_product(name="Tomate", initial_quantity="15.5", unit="kg", min_stock=4)

    def _requisition(self, department="Cocina", **quantities):
        return create_requisition(
            department=department,
            items=[{"product_name": name, "quantity": qty} for name, qty in quantities.items()],
        )

    def test_tomate_delivery_updates_stock_and_history(self):
        requisition = self._requisition(Tomate="2")

        result = process_requisition(
            requisition_id=requisition.pk,
            deliveries={str(self.tomate.pk): {"deliveredQuantity": "2", "observation": "Todo OK"}},
        )

        self.tomate.refresh_from_db()
        requisition.refresh_from_db()
        item = requisition.items.get()

        self.assertEqual(self.tomate.quantity, Decimal("13.500"))
        self.assertEqual(requisition.status, Requisition.Status.COMPLETED)
        self.assertIsNotNone(requisition.processed_at)
        self.assertEqual(item.delivered_quantity, Decimal("2.000"))
        self.assertEqual(item.observation, "Todo OK")
        self.assertEqual(result.message, "Requisición procesada y stock actualizado.")

        movement = self.tomate.movements.order_by("-sequence").first()
        self.assertEqual(movement.movement_type, StockMovement.MovementType.SALIDA)
        self.assertEqual(movement.amount, Decimal("2.000"))
        self.assertEqual(movement.destination, "Cocina")
        self.assertEqual(movement.unit, "kg")

    def test_batch_is_all_or_nothing(self):
        a = create_product(name="Producto A", initial_quantity=5, unit="kg")
        b = create_product(name="Producto B", initial_quantity=3, unit="kg")
        requisition = self._requisition(**{"Producto A": 2, "Producto B": 4})

        with self.assertRaises(InsufficientStockError) as ctx:
            process_requisition(
                requisition_id=requisition.pk,
                deliveries={
                    str(a.pk): {"delivered_quantity": 2},
                    str(b.pk): {"delivered_quantity": 4},
                },
            )

        self.assertEqual(
            ctx.exception.message,
            'Stock insuficiente para "Producto B". No se puede procesar.',
        )
        a.refresh_from_db()
        b.refresh_from_db()
        requisition.refresh_from_db()
        self.assertEqual(a.quantity, Decimal("5.000"))
        self.assertEqual(b.quantity, Decimal("3.000"))
        self.assertEqual(a.movements.count(), 1)
        self.assertEqual(b.movements.count(), 1)
        self.assertEqual(requisition.status, Requisition.Status.PENDING)
        self.assertIsNone(requisition.items.first().delivered_quantity)

    def test_items_of_the_same_product_are_checked_together(self):
        requisition = create_requisition(
            department="Cocina",
            items=[
                {"product_name": "Tomate", "quantity": 10},
                {"product_name": "Tomate", "quantity": 10},
            ],
        )

        with self.assertRaises(InsufficientStockError):
            process_requisition(
                requisition_id=requisition.pk,
                deliveries={str(self.tomate.pk): {"delivered_quantity": 10}},
            )

        self.tomate.refresh_from_db()
        self.assertEqual(self.tomate.quantity, Decimal("15.500"))

    def test_completed_requisition_cannot_be_processed_again(self):
        requisition = self._requisition(Tomate="2")
        deliveries = {str(self.tomate.pk): {"delivered_quantity": "2"}}
        process_requisition(requisition_id=requisition.pk, deliveries=deliveries)

        with self.assertRaises(InvalidRequisitionStateError):
            process_requisition(requisition_id=requisition.pk, deliveries=deliveries)

        self.tomate.refresh_from_db()
        self.assertEqual(self.tomate.quantity, Decimal("13.500"))

    def test_invalid_delivered_quantity_names_the_item(self):
        requisition = self._requisition(Tomate="2")

        for bad in ("-1", "abc", "NaN"):
            with self.assertRaises(LedgerValidationError) as ctx:
                process_requisition(
                    requisition_id=requisition.pk,
                    deliveries={str(self.tomate.pk): {"delivered_quantity": bad}},
                )
            self.assertEqual(ctx.exception.message, "Cantidad inválida para Tomate.")

    def test_zero_delivery_is_recorded_without_movement(self):
        requisition = self._requisition(Tomate="2")

        result = process_requisition(
            requisition_id=requisition.pk,
            deliveries={str(self.tomate.pk): {"delivered_quantity": "0", "observation": "Agotado en cava"}},
        )

        self.tomate.refresh_from_db()
        self.assertEqual(result.movements, [])
        self.assertEqual(self.tomate.quantity, Decimal("15.500"))
        self.assertEqual(requisition.items.get().delivered_quantity, Decimal("0.000"))
        self.assertEqual(result.requisition.status, Requisition.Status.COMPLETED)

    def test_blank_delivery_counts_as_zero(self):
        cebolla = create_product(name="Cebolla", initial_quantity=2, unit="sacos", min_stock=1)
        requisition = self._requisition(Tomate="2", Cebolla="1")

        result = process_requisition(
            requisition_id=requisition.pk,
            deliveries={
                str(self.tomate.pk): {"deliveredQuantity": "2"},
                str(cebolla.pk): {"deliveredQuantity": ""},
            },
        )

        self.tomate.refresh_from_db()
        cebolla.refresh_from_db()
        self.assertEqual(len(result.movements), 1)
        self.assertEqual(self.tomate.quantity, Decimal("13.500"))
        self.assertEqual(cebolla.quantity, Decimal("2.000"))
        self.assertEqual(
            requisition.items.get(product=cebolla).delivered_quantity, Decimal("0.000")
        )
        self.assertEqual(result.requisition.status, Requisition.Status.COMPLETED)

    def test_missing_delivery_counts_as_zero(self):
        requisition = self._requisition(Tomate="2")

        result = process_requisition(requisition_id=requisition.pk, deliveries={})

        self.tomate.refresh_from_db()
        self.assertEqual(result.movements, [])
        self.assertEqual(self.tomate.quantity, Decimal("15.500"))
        self.assertEqual(requisition.items.get().delivered_quantity, Decimal("0.000"))

    def test_commit_failure_leaves_stock_and_requisition_untouched(self):
        a = create_product(name="Producto A", initial_quantity=5, unit="kg")
        b = create_product(name="Producto B", initial_quantity=3, unit="kg")
        requisition = self._requisition(**{"Producto A": 2, "Producto B": 1})

        with mock.patch.object(Requisition, "save", side_effect=DatabaseError("disk full")):
            with self.assertRaises(CommitFailureError):
                process_requisition(
                    requisition_id=requisition.pk,
                    deliveries={
                        str(a.pk): {"delivered_quantity": 2},
                        str(b.pk): {"delivered_quantity": 1},
                    },
                )

        a.refresh_from_db()
        b.refresh_from_db()
        requisition.refresh_from_db()
        self.assertEqual(a.quantity, Decimal("5.000"))
        self.assertEqual(b.quantity, Decimal("3.000"))
        self.assertEqual(a.movements.count(), 1)
        self.assertEqual(b.movements.count(), 1)
        self.assertEqual(requisition.status, Requisition.Status.PENDING)
        self.assertFalse(
            requisition.items.filter(delivered_quantity__isnull=False).exists()
        )

    def test_deleted_product_falls_back_to_name(self):
        requisition = self._requisition(Tomate="2")
        item = requisition.items.get()
        delete_product(product_id=self.tomate.pk)
        replacement = create_product(name="TOMATE", initial_quantity=5, unit="kg")

        process_requisition(
            requisition_id=requisition.pk,
            deliveries={str(item.pk): {"delivered_quantity": "2"}},
        )

        replacement.refresh_from_db()
        item.refresh_from_db()
        self.assertEqual(replacement.quantity, Decimal("3.000"))
        self.assertEqual(item.product_id, replacement.pk)

    def test_unknown_requisition(self):
        with self.assertRaises(NotFoundError):
            process_requisition(requisition_id="nope", deliveries={})

    def test_requires_process_capability(self):
        requisition = self._requisition(Tomate="2")

        with self.assertRaises(OperationNotPermittedError):
            process_requisition(
                requisition_id=requisition.pk,
                deliveries={str(self.tomate.pk): {"delivered_quantity": "2"}},
                capabilities={CAP_INVENTORY_VIEW},
            )

        result = process_requisition(
            requisition_id=requisition.pk,
            deliveries={str(self.tomate.pk): {"delivered_quantity": "2"}},
            capabilities=capabilities_for_role(ROLE_ALMACENISTA),
        )
        self.assertEqual(result.requisition.status, Requisition.Status.COMPLETED)
        self.assertEqual(Product.objects.get(pk=self.tomate.pk).quantity, Decimal("13.500"))
