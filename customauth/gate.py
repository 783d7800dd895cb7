"""
Authorization gate for protected views.

    Unauthenticated -> Token-Verified -> Principal-Resolved -> Admitted
    any step failing                    -> Rejected (401)
    Admitted + role not in allow-list   -> Rejected (403)
"""
import functools
import logging

from asgiref.sync import sync_to_async

from core.errors import AuthenticationError, AuthorizationError
from core.http import get_bearer_token

from .token_utils import decrypt_and_decode_token

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    "invalid_encrypted": "Invalid token. Please log in again!",
    "invalid_token": "Invalid token. Please log in again!",
    "token_expired": "Your token has expired! Please log in again.",
    "user_id_missing": "Invalid token. Please log in again!",
    "user_not_found": "The user belonging to this token no longer exists.",
    "password_changed": "User recently changed password! Please log in again.",
}

# Role allow-lists used by route declarations.
ADMIN_ONLY = frozenset({"admin"})
STAFF = frozenset({"admin", "lead-guide"})


async def authenticate(request):
    """
    Resolve the request's principal from its bearer token, attach it as
    request.principal and return it. Raises AuthenticationError otherwise.
    """
    token = get_bearer_token(request)
    if not token:
        raise AuthenticationError("You are not logged in! Please log in to get access.")

    user, error = await sync_to_async(decrypt_and_decode_token)(token)
    if error is not None or user is None:
        logger.info("Rejected token: %s", error)
        raise AuthenticationError(ERROR_MESSAGES.get(error, ERROR_MESSAGES["invalid_token"]))

    request.principal = user
    return user


def authorize(user, roles):
    if roles is not None and user.role not in roles:
        raise AuthorizationError()


def protect(roles=None, methods=None):
    """
    Declare a view (or some of its HTTP methods) as protected.

        @protect()                                   every method, any role
        @protect(roles=STAFF, methods={"POST"})      only POST, staff only
    """
    def decorator(view):
        @functools.wraps(view)
        async def wrapper(request, *args, **kwargs):
            if methods is None or request.method in methods:
                user = await authenticate(request)
                authorize(user, roles)
            return await view(request, *args, **kwargs)

        return wrapper

    return decorator
