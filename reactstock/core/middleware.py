"""
HTTP middleware: CORS headers and request logging.
"""
import json
import logging
import time

from django.conf import settings
from django.http import HttpResponse

logger = logging.getLogger('reactstock.http')

REDACTED_FIELDS = ('password', 'token', 'access', 'refresh', 'new_password')
SKIP_LOG_PATHS = ('/api/v1/health-check/',)


def redact_body(data):
    """Return a copy of a request payload with credentials masked"""
    if isinstance(data, dict):
        return {
            key: '[REDACTED]' if key in REDACTED_FIELDS else redact_body(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_body(value) for value in data]
    return data


class RequestLoggingMiddleware:
    """Log method, path, status and duration for every API request"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not getattr(settings, 'LOG_HTTP_REQUESTS', True) or request.path in SKIP_LOG_PATHS:
            return self.get_response(request)

        body = self._read_body(request)
        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000

        message = f"{request.method} {request.path} {response.status_code} {duration_ms:.1f}ms"
        if body:
            message = f"{message} - {json.dumps(body, default=str)}"
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)
        return response

    def _read_body(self, request):
        if request.method not in ('POST', 'PUT', 'PATCH'):
            return None
        if 'application/json' not in request.META.get('CONTENT_TYPE', ''):
            return None
        try:
            return redact_body(json.loads(request.body or b'{}'))
        except (ValueError, UnicodeDecodeError):
            return None


class CorsMiddleware:
    """Minimal CORS support for the browser front end"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.method == 'OPTIONS' and 'HTTP_ACCESS_CONTROL_REQUEST_METHOD' in request.META:
            response = HttpResponse(status=200)
        else:
            response = self.get_response(request)
        response['Access-Control-Allow-Origin'] = settings.CORS_ORIGIN
        response['Access-Control-Allow-Methods'] = 'GET, POST, PUT, PATCH, DELETE, OPTIONS'
        response['Access-Control-Allow-Headers'] = 'Authorization, Content-Type'
        return response
