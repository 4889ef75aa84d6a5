# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ALMACENISTA, ROLE_INVENTARIO, ROLE_JEFE


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec("Jefe", ROLE_JEFE, "jefe@example.com", "Jefe", "Cocina"),
    SeedUserSpec("Inventario", ROLE_INVENTARIO, "inventario@example.com", "Control", "Inventario"),
    SeedUserSpec("Almacenista", ROLE_ALMACENISTA, "almacen@example.com", "Almacén", "Principal"),
]


class Command(BaseCommand):
    help = "Seed staff users (one per role)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not password or len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        created_count = 0
        updated_count = 0

        for spec in SEED_USERS:
            is_jefe = spec.role == ROLE_JEFE

            user, created = User.objects.get_or_create(
                email=spec.email,
                defaults={
                    "role": spec.role,
                    "first_name": spec.first_name,
                    "last_name": spec.last_name,
                    "is_staff": True,
                    "is_superuser": is_jefe,
                    "is_active": True,
                },
            )

            dirty = created
            if user.role != spec.role:
                user.role = spec.role
                dirty = True

            if created or force_password:
                user.set_password(password)
                dirty = True

            if dirty:
                user.save()

            if created:
                created_count += 1
                self.stdout.write(f"✅ created: {spec.label} ({spec.role}) -> {spec.email}")
            else:
                if dirty:
                    updated_count += 1
                self.stdout.write(f"↩︎ exists:  {spec.label} ({spec.role}) -> {spec.email}")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        self.stdout.write(f"Updated: {updated_count}")
