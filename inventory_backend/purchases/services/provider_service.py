# purchases/services/provider_service.py

"""
PROVIDER DIRECTORY

save_or_update_provider:
- name and phone are required
- phone identifies the provider: an existing one gets the new name,
  use_count + 1 and last_used = now; otherwise it is created with use_count 1
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from inventory.services import clock
from inventory.services.errors import LedgerValidationError
from inventory.services.ledger import commit_failure, normalize_name, require_capability
from permissions.roles import CAP_PURCHASES_MANAGE
from purchases.models import Provider

logger = logging.getLogger(__name__)

RECENT_PROVIDERS_LIMIT = 5


def save_or_update_provider(*, name, phone, capabilities=None) -> tuple[Provider, bool]:
    require_capability(capabilities, CAP_PURCHASES_MANAGE)

    name = normalize_name(name)
    phone = str(phone or "").strip()
    if not name or not phone:
        raise LedgerValidationError(
            "Por favor, introduce el nombre y número de WhatsApp del proveedor."
        )

    try:
        with transaction.atomic():
            provider = Provider.objects.select_for_update().filter(phone=phone).first()
            created = provider is None

            if created:
                provider = Provider.objects.create(
                    name=name, phone=phone, last_used=clock.now(), use_count=1
                )
            else:
                provider.name = name
                provider.last_used = clock.now()
                provider.use_count = (provider.use_count or 0) + 1
                provider.save(update_fields=["name", "last_used", "use_count"])
    except DatabaseError as exc:
        raise commit_failure(exc, operation="save_or_update_provider", phone=phone) from exc

    logger.info(
        "Provider saved",
        extra={"provider_id": str(provider.pk), "provider_created": created, "use_count": provider.use_count},
    )
    return provider, created


def recent_providers(limit: int = RECENT_PROVIDERS_LIMIT):
    return Provider.objects.order_by("-last_used")[:limit]
