import logging

from django.http import JsonResponse
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt

from core.errors import AppError, AuthenticationError, ClientInputError, NotFoundError
from core.http import allow_methods, json_body, text_field
from core.storage import asave_instance

from .email import password_reset_message, send_email
from .gate import protect
from .models import User
from .token_utils import create_access_token

logger = logging.getLogger(__name__)


# ---------- small helpers ----------

def user_to_dict(user: User):
    """
    Public shape of a user. Password and reset fields never leave the server.
    """
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "photo": user.photo or None,
        "role": user.role,
        "active": user.active,
    }


def _token_response(user, status=200, include_user=False):
    body = {"status": "success", "token": create_access_token(user)}
    if include_user:
        body["data"] = {"user": user_to_dict(user)}
    return JsonResponse(body, status=status)


def _password_fields(data):
    password = data.get("password")
    password_confirm = data.get("passwordConfirm")
    for key, value in (("password", password), ("passwordConfirm", password_confirm)):
        if value is not None and not isinstance(value, str):
            raise ClientInputError(f"{key} must be a string")
    return password, password_confirm


# ---------- views ----------

@csrf_exempt
async def signup_view(request):
    """
    POST /api/v1/auth/signup/

    Body:
    {
        "name": "Jonas",
        "email": "jonas@example.com",
        "password": "pass1234",
        "passwordConfirm": "pass1234"
    }

    The role is never read from the body; new accounts are plain users.
    """
    allow_methods(request, "POST")
    data = json_body(request)

    user = User(
        name=text_field(data, "name"),
        email=text_field(data, "email").lower(),
        photo=text_field(data, "photo"),
    )
    user.set_password(*_password_fields(data))
    await asave_instance(user)

    return _token_response(user, status=201, include_user=True)


@csrf_exempt
async def login_view(request):
    """
    POST /api/v1/auth/login/

    Body:
    {
        "email": "jonas@example.com",
        "password": "pass1234"
    }
    """
    allow_methods(request, "POST")
    data = json_body(request)

    email = text_field(data, "email").lower()
    password, _ = _password_fields(data)

    if not email or not password:
        raise ClientInputError("Please provide email and password!")

    user = await User.objects.active().filter(email=email).afirst()
    if user is None or not await user.acheck_password(password):
        raise AuthenticationError("Incorrect email or password")

    return _token_response(user)


@csrf_exempt
async def forgot_password_view(request):
    """
    POST /api/v1/auth/forgot-password/

    Body: {"email": "jonas@example.com"}

    Stores a digest of a fresh reset token and mails the raw token.
    If delivery fails the token is discarded again.
    """
    allow_methods(request, "POST")
    data = json_body(request)

    email = text_field(data, "email").lower()
    user = await User.objects.active().filter(email=email).afirst() if email else None
    if user is None:
        raise NotFoundError("There is no user with that email address.")

    raw_token = user.create_password_reset_token()
    await user.asave(update_fields=["password_reset_token", "password_reset_expires"])

    reset_url = request.build_absolute_uri(
        reverse("auth-reset-password", args=[raw_token])
    )

    try:
        await send_email(
            email=user.email,
            subject="Your password reset token (valid for 10 min)",
            message=password_reset_message(reset_url),
        )
    except Exception as exc:
        logger.warning("Password reset email to %s failed: %r", user.email, exc)
        user.clear_password_reset_token()
        await user.asave(update_fields=["password_reset_token", "password_reset_expires"])
        raise AppError(
            "There was an error sending the email. Try again later!", 500
        ) from exc

    return JsonResponse(
        {"status": "success", "message": "Token sent to email!"},
        status=200,
    )


@csrf_exempt
async def reset_password_view(request, token):
    """
    PATCH /api/v1/auth/reset-password/<token>/

    Body:
    {
        "password": "newpass123",
        "passwordConfirm": "newpass123"
    }

    Unknown and expired tokens get the same answer.
    """
    allow_methods(request, "PATCH")
    data = json_body(request)

    user = await User.objects.active().filter(
        password_reset_token=User.digest_reset_token(token),
        password_reset_expires__gt=timezone.now(),
    ).afirst()
    if user is None:
        raise ClientInputError("Token is invalid or has expired")

    user.set_password(*_password_fields(data))
    user.clear_password_reset_token()
    await asave_instance(user)

    return _token_response(user)


@csrf_exempt
@protect()
async def update_password_view(request):
    """
    PATCH /api/v1/auth/update-password/

    Needs:
    - Authorization: Bearer <token>

    Body:
    {
        "currentPassword": "pass1234",   (checked when present)
        "password": "newpass123",
        "passwordConfirm": "newpass123"
    }
    """
    allow_methods(request, "PATCH")
    data = json_body(request)
    user = request.principal

    current = data.get("currentPassword")
    if current is not None:
        if not isinstance(current, str) or not await user.acheck_password(current):
            raise AuthenticationError("Your current password is wrong.")

    user.set_password(*_password_fields(data))
    await asave_instance(user)

    return _token_response(user)
