from datetime import datetime, timezone
from typing import Optional, Tuple

import jwt
from cryptography.fernet import Fernet, InvalidToken as FernetInvalidToken
from django.conf import settings
from django.core.exceptions import ValidationError

from .models import User


# -------- time helpers --------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _get_access_lifetime_seconds() -> int:
    """
    Uses settings.JWT_ACCESS_TOKEN_LIFETIME (a timedelta),
    wired from JWT_ACCESS_TOKEN_LIFETIME_MIN in the environment.
    """
    lifetime = getattr(settings, "JWT_ACCESS_TOKEN_LIFETIME", None)
    if lifetime is None:
        raise RuntimeError("JWT_ACCESS_TOKEN_LIFETIME is not configured in settings.")
    return int(lifetime.total_seconds())


# -------- crypto helpers --------

def _get_fernet() -> Fernet:
    """
    Build a Fernet instance from settings.JWT_ENCRYPTION_KEY.
    This must be a urlsafe base64-encoded 32-byte key.
    """
    key = getattr(settings, "JWT_ENCRYPTION_KEY", None)
    if not key:
        raise RuntimeError("JWT_ENCRYPTION_KEY is not set in settings.")
    if isinstance(key, str):
        key = key.encode("utf-8")
    return Fernet(key)


def _get_jwt_params():
    secret = getattr(settings, "JWT_SECRET_KEY", None)
    alg = getattr(settings, "JWT_ALGORITHM", None)

    if not secret:
        raise RuntimeError("JWT_SECRET_KEY is not set in settings.")
    if not alg:
        raise RuntimeError("JWT_ALGORITHM is not set in settings.")

    return secret, alg


# -------- issuance --------

def create_access_token(user: User) -> str:
    """
    Sign a JWT for the user and encrypt it.

    Payload carries only:
    - id   (user primary key)
    - iat, exp

    Returns opaque string suitable for:
        Authorization: Bearer <token>
    """
    # iat keeps sub-second precision; it is compared with password_changed_at
    issued_at = _now().timestamp()

    payload = {
        "id": str(user.id),
        "iat": issued_at,
        "exp": int(issued_at) + _get_access_lifetime_seconds(),
    }

    secret, alg = _get_jwt_params()

    token = jwt.encode(payload, secret, algorithm=alg)
    if isinstance(token, bytes):
        token = token.decode("utf-8")

    f = _get_fernet()
    return f.encrypt(token.encode("utf-8")).decode("utf-8")


# -------- decode / validation --------

def decrypt_and_get_payload(
    encrypted_token: str,
) -> Tuple[Optional[dict], Optional[str]]:
    """
    Decrypt token and return raw JWT payload (no DB lookup).

    error_code values:
    - None                 -> success
    - "invalid_encrypted"  -> Fernet couldn't decrypt
    - "token_expired"      -> JWT 'exp' check failed
    - "invalid_token"      -> bad JWT / bad signature
    """
    if not encrypted_token:
        return None, "invalid_encrypted"

    try:
        f = _get_fernet()
        decrypted_bytes = f.decrypt(encrypted_token.encode("utf-8"))
    except (FernetInvalidToken, ValueError, TypeError):
        return None, "invalid_encrypted"

    decrypted = decrypted_bytes.decode("utf-8")
    secret, alg = _get_jwt_params()

    try:
        payload = jwt.decode(
            decrypted,
            secret,
            algorithms=[alg],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        return None, "token_expired"
    except jwt.InvalidTokenError:
        return None, "invalid_token"

    return payload, None


def decrypt_and_decode_token(
    encrypted_token: str,
) -> Tuple[Optional[User], Optional[str]]:
    """
    Decrypts the token, verifies the JWT, resolves the live user and
    returns (user, error_code).

    error_code values:
    - None                -> success
    - "invalid_encrypted" -> Fernet couldn't decrypt
    - "token_expired"     -> JWT 'exp' check failed
    - "invalid_token"     -> bad JWT / bad signature
    - "user_id_missing"   -> no id in payload
    - "user_not_found"    -> no active User with that id
    - "password_changed"  -> password changed after the token was issued
    """
    payload, error = decrypt_and_get_payload(encrypted_token)
    if error is not None:
        return None, error

    user_id = payload.get("id")
    if not user_id:
        return None, "user_id_missing"

    try:
        user = User.objects.active().get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        return None, "user_not_found"

    if user.changed_password_after(payload["iat"]):
        return user, "password_changed"

    return user, None
