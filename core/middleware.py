import logging
import traceback

import jwt
from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from .errors import AppError, AuthenticationError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went very wrong!"


def _translate(exc):
    """
    Map library exceptions that reach the middleware onto operational errors.
    Returns None when the exception is unexpected.
    """
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, jwt.ExpiredSignatureError):
        return AuthenticationError("Your token has expired! Please log in again.")
    if isinstance(exc, jwt.InvalidTokenError):
        return AuthenticationError("Invalid token. Please log in again!")
    return None


def _is_development():
    return settings.APP_ENV == "development"


def error_response(exc):
    """
    Build the single JSON response for any exception.
    """
    err = _translate(exc)

    if err is not None:
        payload = err.to_dict()
        if _is_development() and err.status_code >= 500:
            payload["stack"] = traceback.format_exception(exc)
        return JsonResponse(payload, status=err.status_code)

    logger.error("Unexpected error: %r", exc, exc_info=exc)

    if _is_development():
        return JsonResponse(
            {
                "status": "error",
                "message": str(exc) or exc.__class__.__name__,
                "error": {"type": exc.__class__.__name__, "args": [repr(a) for a in exc.args]},
                "stack": traceback.format_exception(exc),
            },
            status=500,
        )
    return JsonResponse({"status": "error", "message": GENERIC_MESSAGE}, status=500)


class ErrorNormalizationMiddleware(MiddlewareMixin):
    """
    Turns every exception escaping a view into {status, message, ...}.
    """

    def process_exception(self, request, exception):
        return error_response(exception)
