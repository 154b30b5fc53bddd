"""
DRF exception handler for domain errors.

Billing errors become ``{"detail": ..., "code": ...}`` with the status mapped
from the error class; everything else falls through to DRF's handler.
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from moorings.billing.errors import BillingError
from moorings.billing.errors import BillingValidationError
from moorings.billing.errors import ConflictError
from moorings.billing.errors import ExternalProviderError
from moorings.billing.errors import NotFoundError
from moorings.billing.errors import SignatureVerificationError
from moorings.billing.errors import UpgradeRequiredError

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    BillingValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ExternalProviderError: status.HTTP_502_BAD_GATEWAY,
    SignatureVerificationError: status.HTTP_400_BAD_REQUEST,
    UpgradeRequiredError: status.HTTP_403_FORBIDDEN,
}


def status_for(exc: BillingError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


def api_exception_handler(exc, context):
    if not isinstance(exc, BillingError):
        return exception_handler(exc, context)

    data = {"detail": exc.detail, "code": exc.code}
    if isinstance(exc, UpgradeRequiredError):
        data["upgrade_required"] = True
    response_status = status_for(exc)
    if response_status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("Billing request failed: %s (%s)", exc.detail, exc.code)
    return Response(data, status=response_status)
