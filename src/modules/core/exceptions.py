"""Standardised API error responses.

Every error body has the same shape::

    {
        "type": "validation_error" | "client_error" | "server_error",
        "errors": [{"code": "...", "detail": "...", "attr": "field" | None}]
    }

``exception_handler`` is installed as DRF's ``EXCEPTION_HANDLER`` and
reshapes framework errors (parse, validation, throttling, 404, 405).
Views build domain-error bodies with ``error_response``.  Exceptions
DRF does not know about are left unhandled so they surface as 500s
instead of being masked.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)

VALIDATION_ERROR = "validation_error"
CLIENT_ERROR = "client_error"
SERVER_ERROR = "server_error"


def error_response(
    code: str,
    detail: str,
    http_status: int,
    attr: Optional[str] = None,
    error_type: Optional[str] = None,
    **extra: Any,
) -> Response:
    """Build a single-error response in the standard format."""
    error: Dict[str, Any] = {"code": code, "detail": detail, "attr": attr}
    error.update(extra)
    return Response(
        {"type": error_type or _type_for_status(http_status), "errors": [error]},
        status=http_status,
    )


def exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, (exceptions.ValidationError, exceptions.ParseError)):
        error_type = VALIDATION_ERROR
    else:
        error_type = _type_for_status(response.status_code)

    if isinstance(exc, exceptions.APIException):
        errors = _flatten(exc.get_full_details())
    else:
        errors = [{"code": "error", "detail": str(exc), "attr": None}]

    logger.warning(
        "api.error",
        status_code=response.status_code,
        error_type=error_type,
        codes=[e["code"] for e in errors],
    )
    response.data = {"type": error_type, "errors": errors}
    return response


def _type_for_status(http_status: int) -> str:
    if http_status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return SERVER_ERROR
    return CLIENT_ERROR


def _flatten(details: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    """Turn DRF's nested ``get_full_details()`` into a flat error list."""
    if isinstance(details, list):
        errors: List[Dict[str, Any]] = []
        for item in details:
            errors.extend(_flatten(item, attr))
        return errors
    if isinstance(details, dict):
        if "message" in details and "code" in details:
            return [
                {
                    "code": str(details["code"]),
                    "detail": str(details["message"]),
                    "attr": attr,
                }
            ]
        errors = []
        for key, value in details.items():
            child = key if attr is None else f"{attr}.{key}"
            if key == "non_field_errors":
                child = attr
            errors.extend(_flatten(value, child))
        return errors
    return [{"code": "error", "detail": str(details), "attr": attr}]


def pydantic_error_response(exc: Any) -> Response:
    """400 response listing every error of a ``pydantic.ValidationError``."""
    errors = [
        {
            "code": error["type"],
            "detail": error["msg"],
            "attr": ".".join(str(part) for part in error["loc"]) or None,
        }
        for error in exc.errors()
    ]
    return Response(
        {"type": VALIDATION_ERROR, "errors": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )
