"""Project-wide DRF exception handler.

Every API error leaves the server as ``{"error": ..., "details": ...}`` so the
storefront and the admin pages only have one error shape to read.
"""

import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _validation_details(exc: DjangoValidationError):
    if hasattr(exc, 'error_dict'):
        return exc.message_dict
    return {'non_field_errors': exc.messages}


def api_exception_handler(exc, context):
    """Map exceptions to JSON error bodies.

    - DRF validation errors -> 400 with the field errors as ``details``
    - Django model validation errors (``full_clean``) -> 400
    - auth / permission / not-found -> their DRF status codes
    - anything else -> 500, with the message only visible in DEBUG
    """

    if isinstance(exc, DjangoValidationError):
        return Response(
            {'error': 'Validation error', 'details': _validation_details(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            response.data = {'error': 'Validation error', 'details': response.data}
        elif isinstance(exc, Http404):
            response.data = {'error': 'Not found'}
        else:
            detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
            response.data = {'error': str(detail)}
        return response

    view = context.get('view')
    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'unknown view')

    body = {'error': 'Internal server error'}
    if settings.DEBUG:
        body['details'] = str(exc)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
