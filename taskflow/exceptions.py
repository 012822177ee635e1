# taskflow/exceptions.py
"""
Error kinds raised by the service layer.

Every kind is a DRF ``APIException`` so views can let them propagate and the
framework renders the matching status code with a ``{"detail": ...}`` body.
"""
import logging

from django.db import InterfaceError, OperationalError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

ValidationError = exceptions.ValidationError


class NotFound(exceptions.NotFound):
    default_detail = 'Resource not found.'


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'You are not allowed to perform this action.'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class BadRequest(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'


class Unauthenticated(exceptions.AuthenticationFailed):
    default_detail = 'Invalid credentials.'


class Unavailable(exceptions.APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The data store is unavailable. Try again later.'
    default_code = 'unavailable'


class EmailDeliveryFailed(exceptions.APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Error sending email.'
    default_code = 'email_delivery_failed'


def api_exception_handler(exc, context):
    """DRF exception handler that also maps an unreachable store to 503."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        view = context.get('view')
        logger.error("Data store unavailable in %s: %s", view.__class__.__name__ if view else '-', exc)
        exc = Unavailable()
        return Response({'detail': exc.detail}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None and response.status_code >= 500:
        logger.error("Request failed with %s: %s", response.status_code, exc)
    return response
