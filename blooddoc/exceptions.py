"""
Error taxonomy for the BloodDoc API.

Services raise these; the exception handler below renders every failure as
{"error": ..., "code": ...} so the frontend can show the message directly.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from pymongo.errors import PyMongoError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BloodDocError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Server error'
    default_code = 'SERVER_ERROR'

    def __init__(self, detail=None, code=None, details=None):
        super().__init__(detail=detail, code=code)
        self.details = details


class ValidationError(BloodDocError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'INVALID_INPUT'


class Unauthorized(BloodDocError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authorization token required'
    default_code = 'AUTH_REQUIRED'


class InvalidToken(Unauthorized):
    default_detail = 'Invalid token'
    default_code = 'INVALID_TOKEN'


class InvalidCredentials(Unauthorized):
    default_detail = 'Invalid credentials'
    default_code = 'INVALID_CREDENTIALS'


class Forbidden(BloodDocError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Insufficient permissions'
    default_code = 'FORBIDDEN'


class NotFound(BloodDocError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'NOT_FOUND'


class Conflict(BloodDocError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict'
    default_code = 'CONFLICT'


class DuplicateAccount(Conflict):
    default_detail = 'An account with this email and role already exists'
    default_code = 'DUPLICATE_ACCOUNT'


class AlreadyProcessed(Conflict):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Cannot respond to an already processed request.'
    default_code = 'ALREADY_PROCESSED'


class InsufficientInventory(BloodDocError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Insufficient blood units in inventory.'
    default_code = 'INSUFFICIENT_INVENTORY'


class UpstreamFailure(BloodDocError):
    default_detail = 'Upstream service failed'
    default_code = 'UPSTREAM_FAILURE'


class AnalysisParseError(UpstreamFailure):
    default_detail = 'Failed to parse AI analysis response.'
    default_code = 'ANALYSIS_PARSE_ERROR'


class SMSDeliveryError(UpstreamFailure):
    default_detail = 'Failed to send SMS.'
    default_code = 'SMS_DELIVERY_FAILED'


class ServiceUnavailable(BloodDocError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Database Service Unavailable'
    default_code = 'SERVICE_UNAVAILABLE'


def _error_body(exc):
    detail = exc.detail
    if isinstance(detail, (list, dict)):
        # DRF's own errors (parse failures, method not allowed) may carry structures.
        message = str(next(iter(detail.values() if isinstance(detail, dict) else detail), ''))
        code = 'INVALID_INPUT'
    else:
        message = str(detail)
        code = getattr(detail, 'code', None) or exc.default_code
    body = {"error": message, "code": str(code).upper()}
    if getattr(exc, 'details', None):
        body['details'] = exc.details
    return body


def api_exception_handler(exc, context):
    """DRF exception handler: every failure leaves the view as a JSON error."""
    if isinstance(exc, PyMongoError):
        logger.error("Database error in %s: %s", context.get('view').__class__.__name__, exc)
        exc = ServiceUnavailable()
    elif isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = Forbidden()

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, UpstreamFailure):
            logger.warning("%s: %s", exc.__class__.__name__, getattr(exc, 'details', None) or exc.detail)
        response.data = _error_body(exc)
        return response

    logger.exception("Unhandled error in %s", context.get('view').__class__.__name__, exc_info=exc)
    return Response(
        {"error": "Internal Server Error", "code": "SERVER_ERROR"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
