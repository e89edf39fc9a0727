"""
Service-level exceptions and the DRF exception handler that renders them.

Business rules raise subclasses of `ServiceError`; views let them propagate
and `api_exception_handler` turns them into JSON error responses.
"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Base exception for business-rule violations.

    Subclasses set `code` for programmatic handling and `status_code` for
    the HTTP status used when the error reaches an API view.
    """

    code = 'service_error'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'The request could not be processed.'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_payload(self):
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.extra)
        return payload


def api_exception_handler(exc, context):
    """Render service errors and persistence failures as JSON responses"""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, ServiceError):
        return Response(exc.as_payload(), status=exc.status_code)

    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(f"Database error in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return None
