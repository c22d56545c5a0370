# backend/errors.py

"""
SHARED DOMAIN ERRORS + API ERROR NORMALIZATION

Purpose:
- One base class for every caller-visible commerce error.
- Each error carries a stable `code` so views can map it to an HTTP status
  without string matching.
- error_response() is the single response shape for API errors:
    {"error": {"code": "...", "message": "..."}}

Rules:
- None of these errors are transient; callers must supply new input.
- Storage failures (OperationalError etc.) are NOT wrapped here.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler


class CommerceError(Exception):
    """Base exception for order / stock / cart / quote failures."""

    code = "COMMERCE_ERROR"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.context = context

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(CommerceError):
    """Requested record does not exist."""

    code = "NOT_FOUND"


# =====================================================
# HTTP MAPPING
# =====================================================

CONFLICT_CODES = {
    "INSUFFICIENT_STOCK",
    "OUT_OF_STOCK",
    "NEGATIVE_STOCK",
    "INVALID_TRANSITION",
    "INVALID_QUOTE_STATUS",
    "ALREADY_CONVERTED",
    "QUOTE_EXPIRED",
}


def http_status_for(exc: CommerceError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if exc.code in CONFLICT_CODES:
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def error_response(*, code: str, message: str, http_status: int) -> Response:
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def commerce_error_response(exc: CommerceError) -> Response:
    return error_response(
        code=exc.code,
        message=exc.message,
        http_status=http_status_for(exc),
    )


# =====================================================
# DRF EXCEPTION HANDLER
# =====================================================

def api_exception_handler(exc, context):
    """
    Views catch CommerceError themselves; this is the net for errors raised
    outside those blocks (service-level ValidationError included).
    """
    if isinstance(exc, CommerceError):
        return commerce_error_response(exc)

    if isinstance(exc, DjangoValidationError):
        return Response(
            {
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "; ".join(exc.messages),
                    "fields": getattr(exc, "message_dict", None),
                }
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    return drf_exception_handler(exc, context)
