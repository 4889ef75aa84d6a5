# inventory/services/clock.py

"""
Single clock for movement dates, requisition processing and production runs.
Tests patch inventory.services.clock.now to pin time.
"""

from django.utils import timezone


def now():
    return timezone.now()
