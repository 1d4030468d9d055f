"""
Error kinds surfaced by the API and the unified exception handler.

Every error leaves the API as ``{'ok': False, 'error': {'code', 'message'}}``
where ``code`` is one of ``validation_failed``, ``unauthorized``,
``forbidden``, ``not_found``, ``conflict`` or ``server_error``.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    """Duplicate slot booking, duplicate credentials or protected rows."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'conflict'
    default_code = 'conflict'


ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: 'validation_failed',
    status.HTTP_401_UNAUTHORIZED: 'unauthorized',
    status.HTTP_403_FORBIDDEN: 'forbidden',
    status.HTTP_404_NOT_FOUND: 'not_found',
    status.HTTP_409_CONFLICT: 'conflict',
}


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled error in %s', view.__class__.__name__ if view else 'view')
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = ERROR_CODES.get(resp.status_code, 'api_error')
    resp.data = {'ok': False, 'error': {'code': code, 'message': detail}}
    return resp
