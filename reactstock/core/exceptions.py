"""
JSON error responses for the API.

DRF exceptions keep their status codes. Anything else escaping a view is
logged and turned into a 500 with the error, the request path and a
timestamp.
"""
import logging

from django.http import JsonResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('reactstock.errors')


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    request = context.get('request')
    path = request.path if request is not None else None
    logger.error(f"Unhandled error on {path}: {str(exc)}", exc_info=exc)
    return Response({
        'error': str(exc) or 'Internal server error',
        'path': path,
        'timestamp': timezone.now().isoformat(),
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def json_not_found(request, exception=None):
    return JsonResponse({
        'error': 'Not found',
        'path': request.path,
        'timestamp': timezone.now().isoformat(),
    }, status=404)


def json_server_error(request):
    return JsonResponse({
        'error': 'Internal server error',
        'path': request.path,
        'timestamp': timezone.now().isoformat(),
    }, status=500)
