# workshop_system/exceptions.py

import logging

from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class WorkshopError(Exception):
    """Base class for business errors raised by the workshop services."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'The request could not be completed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(WorkshopError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class Conflict(WorkshopError):
    default_message = 'The operation conflicts with the current state of the record.'


class InsufficientStock(WorkshopError):

    def __init__(self, item_name, available, requested):
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {item_name}. Available: {available}, needed: {requested}"
        )


class StorageFailure(WorkshopError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'A database error occurred.'


def _flatten_detail(detail):
    # DRF error details can be a string, a list or a field -> errors dict.
    if isinstance(detail, dict):
        parts = []
        for field, errors in detail.items():
            text = _flatten_detail(errors)
            parts.append(text if field in ('non_field_errors', 'detail') else f"{field}: {text}")
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(_flatten_detail(item) for item in detail)
    return str(detail)


def error_response(message, status_code):
    return Response({'success': False, 'error': message}, status=status_code)


def api_exception_handler(exc, context):
    """
    Renders every failure as {"success": false, "error": "..."}.

    Business errors are logged at WARNING, storage failures at ERROR with
    the traceback. Anything unrecognised is left to Django (500).
    """
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown'

    if isinstance(exc, DatabaseError):
        logger.error(f"Database error in {view_name}: {exc}", exc_info=exc)
        return error_response(StorageFailure.default_message, StorageFailure.status_code)

    if isinstance(exc, StorageFailure):
        logger.error(f"Storage failure in {view_name}: {exc.message}", exc_info=exc)
        return error_response(exc.message, exc.status_code)

    if isinstance(exc, WorkshopError):
        logger.warning(f"{exc.__class__.__name__} in {view_name}: {exc.message}")
        return error_response(exc.message, exc.status_code)

    if isinstance(exc, DjangoValidationError):
        message = '; '.join(exc.messages)
        logger.warning(f"Validation error in {view_name}: {message}")
        return error_response(message, status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return error_response(str(exc) or NotFound.default_message, status.HTTP_404_NOT_FOUND)

    if isinstance(exc, PermissionDenied):
        return error_response(str(exc) or 'Access denied.', status.HTTP_403_FORBIDDEN)

    response = exception_handler(exc, context)
    if response is not None:
        message = _flatten_detail(response.data)
        if response.status_code < 500:
            logger.warning(f"Request refused in {view_name} ({response.status_code}): {message}")
        response.data = {'success': False, 'error': message}
    return response
