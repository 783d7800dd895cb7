"""
Error taxonomy shared by every app.

Operational errors carry an HTTP status and a message that is safe to show
to the client. Anything that is not an AppError is treated as unexpected by
core.middleware.ErrorNormalizationMiddleware.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.status = "fail" if str(self.status_code).startswith("4") else "error"
        self.is_operational = True

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message}


class ClientInputError(AppError):
    """Malformed query string or request body."""
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class DuplicateKeyError(AppError):
    status_code = 400

    def __init__(self, fields: Dict[str, Any]):
        self.fields = dict(fields)
        pairs = ", ".join(f"{name} = {value!r}" for name, value in self.fields.items())
        super().__init__(f"Duplicate field value: {pairs}. Please use another value!")

    def to_dict(self):
        result = super().to_dict()
        result["fields"] = sorted(self.fields)
        return result


class ValidationError(AppError):
    """One or more schema constraints were violated."""
    status_code = 400

    def __init__(self, errors: Dict[str, list]):
        self.errors = errors
        messages = []
        for field_messages in errors.values():
            messages.extend(m.rstrip(".") for m in field_messages)
        super().__init__(f"Invalid input data. {'. '.join(messages)}")


class CastError(AppError):
    """A value could not be converted to the type its column stores."""
    status_code = 400

    def __init__(self, path: str, value: Any):
        self.path = path
        self.value = value
        super().__init__(f"Invalid {path}: {value}.")


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    status_code = 403

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message)


class MethodNotAllowedError(AppError):
    status_code = 405

    def __init__(self, method: str):
        super().__init__(f"Method {method} not allowed")
