import json

from .errors import ClientInputError, MethodNotAllowedError


# ---------- small helpers ----------

def json_body(request):
    """
    Parse JSON body into a dict. Empty body -> {}.
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ClientInputError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ClientInputError("JSON body must be an object")
    return data


def get_bearer_token(request):
    """
    Extract token from Authorization: Bearer <token> header.
    """
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def allow_methods(request, *methods):
    if request.method not in methods:
        raise MethodNotAllowedError(request.method)


def query_params(request):
    """
    Flatten a QueryDict; a repeated key keeps its last value.
    """
    return {key: request.GET[key] for key in request.GET}


def text_field(data, key):
    """
    Read a string field from a parsed body. Missing/null -> "".
    """
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ClientInputError(f"{key} must be a string")
    return value.strip()
