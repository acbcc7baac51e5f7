import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ValidationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"
    default_code = "invalid"


class InsufficientStock(ValidationFailed):
    default_detail = "Insufficient inventory"
    default_code = "insufficient_stock"


class ResourceNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"
    default_code = "not_found"


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"
    default_code = "conflict"


class RoleForbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"
    default_code = "forbidden"


def _message_from(detail):
    if isinstance(detail, dict):
        for key, value in detail.items():
            text = _message_from(value)
            return text if key == "non_field_errors" else f"{key}: {text}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _message_from(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """
    Every error leaves the API as {"message": ..., "error": ...}.
    Unique-constraint violations become 409 and anything unrecognised
    becomes a 500 carrying the raw exception message.
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view else "unknown view"

    if isinstance(exc, DjangoValidationError):
        exc = ValidationFailed(detail="; ".join(exc.messages))

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data
        message = _message_from(detail.get("detail", detail) if isinstance(detail, dict) else detail)
        response.data = {"message": message, "error": detail}
        if response.status_code >= 500:
            logger.error(f"{view_name} failed: {message}", exc_info=exc)
        return response

    # ProtectedError subclasses IntegrityError
    if isinstance(exc, ProtectedError):
        return Response(
            {"message": "Cannot delete a record that other records still reference", "error": str(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, IntegrityError):
        logger.warning(f"{view_name} hit a constraint violation: {exc}")
        return Response(
            {"message": "A record with the same unique value already exists", "error": str(exc)},
            status=status.HTTP_409_CONFLICT,
        )

    logger.error(f"Unexpected error in {view_name}: {exc}", exc_info=exc)
    return Response(
        {"message": "Internal server error", "error": str(exc)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
