import hashlib
import secrets
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import acheck_password, check_password, make_password
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

PASSWORD_MIN_LENGTH = 8


class UserQuerySet(models.QuerySet):
    def active(self):
        return self.filter(active=True)


class User(models.Model):
    class Role(models.TextChoices):
        USER = "user", "User"
        GUIDE = "guide", "Guide"
        LEAD_GUIDE = "lead-guide", "Lead guide"
        ADMIN = "admin", "Admin"

    # JSON name -> model field
    API_FIELDS = {
        "passwordChangedAt": "password_changed_at",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        error_messages={"blank": "Please tell us your name!", "null": "Please tell us your name!"},
    )
    email = models.EmailField(
        max_length=254,
        unique=True,
        error_messages={
            "blank": "Please provide an email address!",
            "invalid": "Please provide a valid email!",
            "unique": "A user with that email already exists.",
        },
    )
    photo = models.CharField(max_length=255, blank=True)
    role = models.CharField(
        max_length=16,
        choices=Role.choices,
        default=Role.USER,
    )
    # bcrypt hash; the plaintext only lives here between set_password() and save()
    password = models.CharField(
        max_length=128,
        error_messages={"blank": "Please add a password for your account!"},
    )
    password_changed_at = models.DateTimeField(null=True, blank=True)
    password_reset_token = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    password_reset_expires = models.DateTimeField(null=True, blank=True)
    active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserQuerySet.as_manager()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._password_pending = False
        self._password_confirm = None

    def __str__(self):
        return f"User({self.email})"

    # ---------- password ----------

    def set_password(self, raw_password, password_confirm):
        """
        Stage a new plaintext password. It is validated by clean() and
        replaced by its hash in save().
        """
        self.password = raw_password or ""
        self._password_confirm = password_confirm
        self._password_pending = True

    def clean(self):
        self.email = (self.email or "").strip().lower()
        self.name = (self.name or "").strip()
        if self._password_pending:
            errors = {}
            if self.password and len(self.password) < PASSWORD_MIN_LENGTH:
                errors.setdefault("password", []).append(
                    f"Password must be at least {PASSWORD_MIN_LENGTH} characters long!"
                )
            if not self._password_confirm:
                errors.setdefault("passwordConfirm", []).append("Please confirm your password!")
            elif self._password_confirm != self.password:
                errors.setdefault("passwordConfirm", []).append("Passwords are not the same!")
            if errors:
                raise ValidationError(errors)

    def save(self, *args, **kwargs):
        if self._password_pending:
            is_new = self._state.adding
            self.password = make_password(self.password)
            self._password_confirm = None
            self._password_pending = False
            if not is_new:
                self.password_changed_at = timezone.now()
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = set(update_fields) | {"password", "password_changed_at"}
        super().save(*args, **kwargs)

    def check_password(self, candidate):
        return check_password(candidate, self.password)

    async def acheck_password(self, candidate):
        return await acheck_password(candidate, self.password)

    def changed_password_after(self, issued_at):
        """
        True when the password changed after a token issued at `issued_at`
        (seconds since epoch, fractional) was signed.
        """
        if self.password_changed_at is None:
            return False
        return self.password_changed_at.timestamp() > float(issued_at)

    # ---------- password reset ----------

    @staticmethod
    def digest_reset_token(raw_token):
        return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

    def create_password_reset_token(self):
        """
        Generate a one-time reset token. Only its SHA-256 digest is kept on
        the user; the raw value is returned for out-of-band delivery.
        """
        raw_token = secrets.token_hex(32)
        self.password_reset_token = self.digest_reset_token(raw_token)
        self.password_reset_expires = timezone.now() + timedelta(
            minutes=settings.PASSWORD_RESET_TIMEOUT_MIN
        )
        return raw_token

    def clear_password_reset_token(self):
        self.password_reset_token = None
        self.password_reset_expires = None
