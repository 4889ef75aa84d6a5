# inventory/management/commands/seed_inventory.py

from __future__ import annotations

from dataclasses import dataclass

from django.core.management.base import BaseCommand
from django.db import transaction

from inventory.models import Product
from inventory.services import create_product, find_product_by_name
from purchases.models import Invoice
from purchases.services import create_invoice
from requisitions.models import Requisition
from requisitions.services import create_requisition, process_requisition


@dataclass(frozen=True)
class SeedProductSpec:
    name: str
    quantity: str
    unit: str
    min_stock: str
    category: str


SEED_PRODUCTS = [
    # Carnes
    SeedProductSpec("Suprema de Pollo", "25", "kg", "10", "Carnes"),
    SeedProductSpec("Lomito", "15", "kg", "5", "Carnes"),
    SeedProductSpec("Lomo de Cerdo", "12", "kg", "5", "Carnes"),
    SeedProductSpec("Solomo", "18", "kg", "8", "Carnes"),
    SeedProductSpec("Carne para Hamburguesa", "20.75", "kg", "5", "Carnes"),
    SeedProductSpec("Chorizo", "15", "kg", "4", "Carnes"),
    SeedProductSpec("Carne de Parrilla (Punta)", "0", "kg", "5", "Carnes"),
    # Verduras
    SeedProductSpec("Tomate", "15.5", "kg", "4", "Verduras"),
    SeedProductSpec("Lechuga", "0", "cestas", "2", "Verduras"),
    SeedProductSpec("Cebolla", "2", "sacos", "1", "Verduras"),
    # Despensa
    SeedProductSpec("Pan de Hamburguesa", "100", "unidades", "20", "Despensa"),
    SeedProductSpec("Queso Amarillo", "10", "kg", "2", "Despensa"),
    SeedProductSpec("Papas Fritas Congeladas", "25", "kg", "10", "Despensa"),
    SeedProductSpec("Refresco 2L", "50", "botellas", "15", "Despensa"),
    SeedProductSpec("Masa de Pizza", "30", "unidades", "10", "Despensa"),
    SeedProductSpec("Salsa para Pizza", "10", "litros", "3", "Despensa"),
    SeedProductSpec("Helado de Chocolate", "4.5", "litros", "2", "Despensa"),
    SeedProductSpec("Aceite", "10", "litros", "3", "Despensa"),
    SeedProductSpec("Arroz", "20", "kg", "5", "Despensa"),
    SeedProductSpec("Harina P.A.N.", "20", "kg", "5", "Despensa"),
    # Licores
    SeedProductSpec("Cerveza Polar", "120", "unidades", "24", "Licores"),
    SeedProductSpec("Ron Cacique", "12", "botellas", "3", "Licores"),
    SeedProductSpec("Whisky Old Parr", "6", "botellas", "2", "Licores"),
]

# (department, [(product, requested, unit)], delivered or None, observation)
SAMPLE_REQUISITIONS = [
    ("Cocina", [("Carne para Hamburguesa", "5", "kg"), ("Tomate", "2", "kg"), ("Pan de Hamburguesa", "20", "unidades")], None, ""),
    ("Barra", [("Refresco 2L", "10", "botellas")], None, ""),
    ("Pizzería", [("Masa de Pizza", "15", "unidades")], "15", "Todo OK"),
    ("Heladería", [("Helado de Chocolate", "5", "litros")], None, ""),
]

SAMPLE_INVOICES = [
    {
        "invoice_number": "FC-001",
        "provider": "Carnicería El Toro",
        "total_amount": "150.75",
        "status": "paid",
        "source": "manual",
        "raw_text": "",
        "items": [
            {"product_name": "Carne de Parrilla (Punta)", "quantity": "10", "unit": "kg", "price": "15.075"},
        ],
    },
    {
        "invoice_number": "FC-002",
        "provider": "Verduras Frescas C.A.",
        "total_amount": "75.50",
        "status": "pending",
        "source": "whatsapp",
        "raw_text": "Factura de Verduras Frescas: 5 cestas de lechuga, 10kg tomate. Total 75.50",
        "items": [
            {"product_name": "Lechuga", "quantity": "5", "unit": "cestas", "price": "50"},
            {"product_name": "Tomate", "quantity": "10", "unit": "kg", "price": "25.50"},
        ],
    },
]


class Command(BaseCommand):
    help = "Seed the restaurant's starting inventory (and optional sample documents)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--with-samples",
            action="store_true",
            help="Also create sample requisitions and supplier invoices.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created_count = 0

        for spec in SEED_PRODUCTS:
            if find_product_by_name(spec.name) is not None:
                self.stdout.write(f"↩︎ exists:  {spec.name}")
                continue

            create_product(
                name=spec.name,
                initial_quantity=spec.quantity,
                unit=spec.unit,
                min_stock=spec.min_stock,
                category=spec.category,
            )
            created_count += 1
            self.stdout.write(f"✅ created: {spec.name} ({spec.quantity} {spec.unit})")

        if options.get("with_samples"):
            self._seed_samples()

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        self.stdout.write(f"Products: {Product.objects.count()}")

    def _seed_samples(self):
        if not Requisition.objects.exists():
            for department, lines, delivered, observation in SAMPLE_REQUISITIONS:
                requisition = create_requisition(
                    department=department,
                    items=[
                        {"product_name": name, "quantity": qty, "unit": unit}
                        for name, qty, unit in lines
                    ],
                )
                if delivered is not None:
                    process_requisition(
                        requisition_id=requisition.pk,
                        deliveries={
                            str(item.product_id): {
                                "delivered_quantity": delivered,
                                "observation": observation,
                            }
                            for item in requisition.items.all()
                        },
                    )
                self.stdout.write(f"✅ requisition: {department}")

        for data in SAMPLE_INVOICES:
            if Invoice.objects.filter(invoice_number=data["invoice_number"]).exists():
                continue
            create_invoice(**data)
            self.stdout.write(f"✅ invoice: #{data['invoice_number']}")
