# inventory/tests/test_seed_command.py

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from inventory.models import Product
from purchases.models import Invoice
from requisitions.models import Requisition


class SeedInventoryCommandTests(TestCase):
    def test_seeds_products_once(self):
        call_command("seed_inventory", stdout=StringIO())
        call_command("seed_inventory", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 23)
        tomate = Product.objects.get(name="Tomate")
        self.assertEqual(tomate.quantity, Decimal("15.500"))
        self.assertEqual(tomate.movements.count(), 1)
        self.assertEqual(Product.objects.get(name="Lechuga").stock_status, "agotado")

    def test_samples(self):
        call_command("seed_inventory", "--with-samples", stdout=StringIO())

        self.assertEqual(Requisition.objects.count(), 4)
        pizzeria = Requisition.objects.get(department="Pizzería")
        self.assertEqual(pizzeria.status, Requisition.Status.COMPLETED)
        self.assertEqual(Product.objects.get(name="Masa de Pizza").quantity, Decimal("15.000"))
        self.assertEqual(Invoice.objects.count(), 2)
