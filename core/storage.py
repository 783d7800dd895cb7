"""
Storage adapter: runs ORM writes/lookups and converts their failures into
the typed errors of core.errors at the point where they happen.
"""
import re
from contextlib import contextmanager

from asgiref.sync import sync_to_async
from django.core.exceptions import (
    FieldDoesNotExist,
    FieldError,
    ValidationError as DjangoValidationError,
)
from django.db import IntegrityError
from django.db.models import BooleanField, JSONField

from .errors import (
    CastError,
    ClientInputError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)

# sqlite:   UNIQUE constraint failed: customauth_user.email
# postgres: ... DETAIL:  Key (email)=(jonas@example.com) already exists.
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((\w+)\)=\((.*)\) already exists")


def api_name(model, field_name):
    """
    Model field name -> name used in JSON payloads.
    """
    reverse = {v: k for k, v in getattr(model, "API_FIELDS", {}).items()}
    return reverse.get(field_name, field_name)


def _duplicate_from_integrity_error(exc, instance):
    text = str(exc)
    match = _POSTGRES_UNIQUE.search(text)
    if match:
        field, value = match.group(1), match.group(2)
    else:
        match = _SQLITE_UNIQUE.search(text)
        if not match:
            return None
        field = match.group(1)
        value = getattr(instance, field, None) if instance is not None else None
    model = type(instance) if instance is not None else None
    return DuplicateKeyError({api_name(model, field): value})


def _from_validation_error(exc, instance, path):
    if not hasattr(exc, "error_dict"):
        # Field.to_python() style failure: a single value of the wrong type.
        value = None
        for err in exc.error_list:
            if err.params and "value" in err.params:
                value = err.params["value"]
                break
        return CastError(path, value)

    model = type(instance) if instance is not None else None
    duplicates = {}
    messages = {}
    for field, errors in exc.error_dict.items():
        for err in errors:
            if err.code == "unique" and field != "__all__":
                duplicates[api_name(model, field)] = getattr(instance, field, None)
            else:
                messages.setdefault(api_name(model, field), []).extend(err.messages)

    if duplicates and not messages:
        return DuplicateKeyError(duplicates)
    return ValidationError(messages)


@contextmanager
def translate_storage_errors(instance=None, path="id"):
    """
    Convert ORM failures raised inside the block into operational errors.

    instance: model instance being written (used to name duplicate values)
    path: name reported when a single value fails to cast (lookups by id)
    """
    try:
        yield
    except DjangoValidationError as exc:
        raise _from_validation_error(exc, instance, path) from exc
    except IntegrityError as exc:
        err = _duplicate_from_integrity_error(exc, instance)
        if err is None:
            raise
        raise err from exc
    except (FieldError, FieldDoesNotExist) as exc:
        raise ClientInputError(f"Invalid field in query: {exc}") from exc


# ---------- writes ----------

def save_instance(instance, update_fields=None):
    """
    Validate then save. Runs model validators, unique checks and clean().
    """
    with translate_storage_errors(instance):
        instance.full_clean()
        instance.save(update_fields=update_fields)
    return instance


async def asave_instance(instance, update_fields=None):
    return await sync_to_async(save_instance)(instance, update_fields=update_fields)


# ---------- reads ----------

async def aget_or_404(queryset, message, **lookup):
    with translate_storage_errors():
        obj = await queryset.filter(**lookup).afirst()
    if obj is None:
        raise NotFoundError(message)
    return obj


# ---------- query specs ----------

def _model_field(model, name, hidden):
    """
    API name -> concrete model field. Unknown and hidden names are refused.
    """
    field_name = getattr(model, "API_FIELDS", {}).get(name, name)
    if name in hidden or field_name in hidden:
        raise ClientInputError(f"Unknown field '{name}'")
    try:
        field = model._meta.get_field(field_name)
    except FieldDoesNotExist:
        raise ClientInputError(f"Unknown field '{name}'")
    if not field.concrete or field.is_relation:
        raise ClientInputError(f"Unknown field '{name}'")
    return field


def _coerce(field, predicate):
    value = predicate.value
    if isinstance(field, BooleanField) and isinstance(value, str):
        value = {"true": True, "false": False}.get(value.strip().lower(), value)
    try:
        return field.to_python(value)
    except DjangoValidationError as exc:
        raise CastError(predicate.field, predicate.value) from exc


def apply_spec(queryset, spec, hidden=()):
    """
    Apply a core.features.QuerySpec to a queryset (lazy; nothing runs yet).

    hidden: API or model field names that may not be filtered, sorted or
    projected on.
    """
    model = queryset.model
    hidden = frozenset(hidden)

    if spec.predicates:
        lookups = {}
        for predicate in spec.predicates:
            field = _model_field(model, predicate.field, hidden)
            if predicate.op != "eq" and isinstance(field, JSONField):
                # a JSON lookup would read the operator as a key
                raise ClientInputError(
                    f"Operator '{predicate.op}' is not supported on '{predicate.field}'"
                )
            key = field.name if predicate.op == "eq" else f"{field.name}__{predicate.op}"
            lookups[key] = _coerce(field, predicate)
        queryset = queryset.filter(**lookups)

    if spec.ordering:
        queryset = queryset.order_by(
            *(
                ("-" if key.descending else "") + _model_field(model, key.field, hidden).name
                for key in spec.ordering
            )
        )

    if spec.projection is not None and spec.projection.fields:
        names = [_model_field(model, f, hidden).name for f in spec.projection.fields]
        if spec.projection.include:
            queryset = queryset.only(*names)
        else:
            # the primary key is always loaded
            queryset = queryset.defer(*(n for n in names if n != model._meta.pk.name))

    if spec.window is not None:
        start = spec.window.offset
        queryset = queryset[start:start + spec.window.limit]

    return queryset


def projected_fields(all_fields, spec):
    """
    API names a serializer may read for rows fetched with `spec`.
    The primary key is always present.
    """
    projection = spec.projection
    if projection is None:
        return tuple(all_fields)
    if projection.include:
        wanted = set(projection.fields) | {"id"}
        return tuple(f for f in all_fields if f in wanted)
    return tuple(f for f in all_fields if f not in projection.fields)
