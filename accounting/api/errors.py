# accounting/api/errors.py

"""
PATH: accounting/api/errors.py

Domain error -> HTTP response mapping shared by every API view.

- 400: validation (malformed/unbalanced/closed period/unknown account,
       posting rule violations, bad depreciation parameters)
- 404: unknown objects
- 409: state conflicts (already reversed, consumed cost layers,
       insufficient stock)
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    AccountResolutionError,
    AlreadyReversedError,
    EntryNotFoundError,
    EntryValidationError,
)
from fixed_assets.services.depreciation import InvalidDepreciationParametersError
from inventory.services.fifo_costing import (
    CostLayerConsumedError,
    InsufficientStockError,
    StockRestorationError,
)

logger = logging.getLogger(__name__)

DOMAIN_ERRORS = (
    AccountingServiceError,
    InvalidDepreciationParametersError,
    CostLayerConsumedError,
    InsufficientStockError,
    StockRestorationError,
)

CONFLICT_ERRORS = (AlreadyReversedError, CostLayerConsumedError, InsufficientStockError)


def domain_error_response(exc: Exception) -> Response:
    body = {"detail": str(exc)}

    kind = getattr(exc, "kind", None)
    if kind:
        body["kind"] = kind
    if isinstance(exc, EntryValidationError) and exc.line_index is not None:
        body["line_index"] = exc.line_index

    if isinstance(exc, CONFLICT_ERRORS):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (AccountResolutionError, EntryNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_400_BAD_REQUEST

    logger.info("Request rejected by domain rule", extra={"error": type(exc).__name__, "status": code})
    return Response(body, status=code)


def forbidden(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_403_FORBIDDEN)


def not_found(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_404_NOT_FOUND)


def model_validation_response(exc: DjangoValidationError) -> Response:
    detail = exc.message_dict if hasattr(exc, "error_dict") else {"detail": exc.messages}
    return Response(detail, status=status.HTTP_400_BAD_REQUEST)
