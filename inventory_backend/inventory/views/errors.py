# inventory/views/errors.py

"""
API ERROR NORMALIZATION

Every domain error leaves the API as:
    {"error": {"code": "...", "message": "..."}}
"""

import logging

from rest_framework.response import Response

from inventory.services.errors import LedgerError

logger = logging.getLogger(__name__)


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def ledger_error_response(exc: LedgerError, *, request=None):
    logger.warning(
        "Ledger operation rejected",
        extra={
            "code": exc.code,
            "error_message": exc.message,
            "path": getattr(request, "path", None),
        },
    )
    return error_response(
        code=exc.code,
        message=exc.message or str(exc),
        http_status=exc.http_status,
    )
