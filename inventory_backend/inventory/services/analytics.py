# inventory/services/analytics.py

"""
INVENTORY ANALYTICS (READ-ONLY)

- stock status classification (óptimo / bajo / agotado)
- daily entrada / salida totals
- most moved products (by history length)
- consumption forecast (days of stock left at the observed salida rate)
- reorder recommendations for products at or below min_stock

Nothing here writes. Cancelled movements and reversal records are ignored
for totals and rates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from inventory.models import Product, StockMovement

SECONDS_PER_DAY = Decimal(60 * 60 * 24)


def day_bounds(d):
    """Timezone-aware [start, end) for a local date."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(d, time.min), tz)
    return start, start + timedelta(days=1)


# ------------------------------------------------------
# STOCK STATUS
# ------------------------------------------------------

def stock_status_counts(queryset=None) -> dict:
    qs = queryset if queryset is not None else Product.objects.all()
    return qs.aggregate(
        optimo=Count("id", filter=Q(quantity__gt=F("min_stock"))),
        bajo=Count("id", filter=Q(quantity__lte=F("min_stock"), quantity__gt=0)),
        agotado=Count("id", filter=Q(quantity__lte=0)),
    )


def products_by_status(status: Optional[str] = None, queryset=None):
    qs = queryset if queryset is not None else Product.objects.all()
    if status == Product.StockStatus.OPTIMO:
        return qs.filter(quantity__gt=F("min_stock"))
    if status == Product.StockStatus.BAJO:
        return qs.filter(quantity__lte=F("min_stock"), quantity__gt=0)
    if status == Product.StockStatus.AGOTADO:
        return qs.filter(quantity__lte=0)
    return qs


# ------------------------------------------------------
# DAILY TOTALS + TOP MOVED
# ------------------------------------------------------

def daily_totals(d=None) -> dict:
    d = d or timezone.localdate()
    start, end = day_bounds(d)

    totals = (
        StockMovement.objects.filter(date__gte=start, date__lt=end, cancelled=False)
        .values("movement_type")
        .annotate(total=Sum("amount"))
    )
    by_type = {row["movement_type"]: row["total"] or Decimal("0") for row in totals}

    return {
        "date": d,
        "entradas": by_type.get(StockMovement.MovementType.ENTRADA, Decimal("0")),
        "salidas": by_type.get(StockMovement.MovementType.SALIDA, Decimal("0")),
    }


def top_moved_products(limit: int = 5):
    return (
        Product.objects.annotate(movement_count=Count("movements"))
        .order_by("-movement_count", "name")[:limit]
    )


# ------------------------------------------------------
# CONSUMPTION FORECAST
# ------------------------------------------------------

@dataclass(frozen=True)
class ConsumptionForecast:
    product: Product
    daily_consumption: Decimal
    days_remaining: Decimal


def forecast_for_product(product: Product, salidas=None) -> Optional[ConsumptionForecast]:
    """
    Needs at least two non-cancelled salidas.
    Elapsed time is first-to-last salida, floored at one day.
    """
    if salidas is None:
        salidas = list(
            product.movements.filter(
                movement_type=StockMovement.MovementType.SALIDA, cancelled=False
            ).order_by("date", "sequence")
        )
    if len(salidas) < 2:
        return None

    first, last = salidas[0].date, salidas[-1].date
    elapsed_days = Decimal(str((last - first).total_seconds())) / SECONDS_PER_DAY
    elapsed_days = max(Decimal("1"), elapsed_days)

    consumed = sum((m.amount for m in salidas), Decimal("0"))
    daily = consumed / elapsed_days
    if daily <= 0:
        return None

    return ConsumptionForecast(
        product=product,
        daily_consumption=daily,
        days_remaining=Decimal(product.quantity) / daily,
    )


def consumption_forecast(limit: int = 5) -> list[ConsumptionForecast]:
    """Products closest to running out (in stock only), soonest first."""
    salidas_by_product: dict = {}
    salidas = (
        StockMovement.objects.filter(
            movement_type=StockMovement.MovementType.SALIDA,
            cancelled=False,
            product__quantity__gt=0,
        )
        .select_related("product")
        .order_by("date", "sequence")
    )
    for m in salidas:
        salidas_by_product.setdefault(m.product_id, (m.product, []))[1].append(m)

    forecasts = []
    for product, rows in salidas_by_product.values():
        f = forecast_for_product(product, rows)
        if f is not None:
            forecasts.append(f)

    forecasts.sort(key=lambda f: (f.days_remaining, f.product.name))
    return forecasts[:limit]


# ------------------------------------------------------
# REORDER RECOMMENDATIONS
# ------------------------------------------------------

def recommended_reorder_quantity(product: Product) -> Decimal:
    """
    Refill to min_stock plus one more min_stock of buffer.
    shortfall > 0 -> ceil(shortfall) + min_stock, else min_stock.
    """
    minimum = Decimal(product.min_stock or 0)
    shortfall = minimum - Decimal(product.quantity or 0)
    if shortfall > 0:
        return Decimal(math.ceil(shortfall)) + minimum
    return minimum


def reorder_recommendations(category: Optional[str] = None) -> list[dict]:
    qs = Product.objects.filter(quantity__lte=F("min_stock"))
    if category:
        qs = qs.filter(category__iexact=category.strip())

    return [
        {
            "product": p,
            "quantity": recommended_reorder_quantity(p),
            "unit": p.unit,
        }
        for p in qs.order_by("category", "name")
    ]


def inventory_summary(d=None) -> dict:
    return {
        "total_products": Product.objects.count(),
        "stock_status": stock_status_counts(),
        "today": daily_totals(d),
        "top_moved": list(top_moved_products()),
    }
