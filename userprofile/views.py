from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from core.errors import ClientInputError
from core.features import QueryBuilder
from core.http import allow_methods, json_body, query_params, text_field
from core.storage import aget_or_404, apply_spec, asave_instance, translate_storage_errors
from customauth.gate import ADMIN_ONLY, protect
from customauth.models import User
from customauth.views import user_to_dict

# Never filterable, sortable or selectable from the query string.
HIDDEN_FIELDS = ("password", "password_reset_token", "password_reset_expires")


# ---------- me ----------

@csrf_exempt
@protect()
async def me_view(request):
    """
    GET /api/v1/users/me/
    """
    allow_methods(request, "GET")
    return JsonResponse(
        {"status": "success", "data": {"user": user_to_dict(request.principal)}},
        status=200,
    )


@csrf_exempt
@protect()
async def update_me_view(request):
    """
    PATCH /api/v1/users/update-me/

    Body: {"name": "...", "email": "..."}   (any other key is ignored)

    Passwords go through /auth/update-password/.
    """
    allow_methods(request, "PATCH")
    data = json_body(request)

    if "password" in data or "passwordConfirm" in data:
        raise ClientInputError(
            "This route is not for password updates. Please use /update-password/."
        )

    user = request.principal
    if "name" in data:
        user.name = text_field(data, "name")
    if "email" in data:
        user.email = text_field(data, "email").lower()
    await asave_instance(user)

    return JsonResponse(
        {"status": "success", "data": {"user": user_to_dict(user)}},
        status=200,
    )


@csrf_exempt
@protect()
async def delete_me_view(request):
    """
    DELETE /api/v1/users/delete-me/

    Soft delete: the row stays, the account stops resolving.
    """
    allow_methods(request, "DELETE")
    user = request.principal
    user.active = False
    await user.asave(update_fields=["active", "updated_at"])
    return HttpResponse(status=204)


# ---------- admin ----------

@csrf_exempt
@protect(roles=ADMIN_ONLY)
async def users_view(request):
    """
    GET /api/v1/users/?role=guide&sort=name&page=1&limit=20   (admin)
    """
    allow_methods(request, "GET")

    spec = (
        QueryBuilder(query_params(request), default_sort="name")
        .filter()
        .sort()
        .paginate()
        .build()
    )

    with translate_storage_errors():
        queryset = apply_spec(User.objects.active(), spec, hidden=HIDDEN_FIELDS)
        users = [user async for user in queryset]

    return JsonResponse(
        {
            "status": "success",
            "results": len(users),
            "data": {"users": [user_to_dict(u) for u in users]},
        },
        status=200,
    )


@csrf_exempt
@protect(roles=ADMIN_ONLY)
async def user_detail_view(request, user_id):
    """
    GET /api/v1/users/<id>/   (admin)
    """
    allow_methods(request, "GET")
    user = await aget_or_404(User.objects.active(), "No user found with that ID", pk=user_id)
    return JsonResponse(
        {"status": "success", "data": {"user": user_to_dict(user)}},
        status=200,
    )
