from datetime import datetime

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from core.features import QueryBuilder
from core.http import allow_methods, json_body, query_params
from core.storage import (
    aget_or_404,
    apply_spec,
    asave_instance,
    projected_fields,
    translate_storage_errors,
)
from customauth.gate import STAFF, protect

from .models import Tour

# Order of keys in the JSON representation.
TOUR_FIELDS = (
    "id",
    "name",
    "slug",
    "duration",
    "maxGroupSize",
    "difficulty",
    "ratingsAverage",
    "ratingsQuantity",
    "price",
    "priceDiscount",
    "summary",
    "description",
    "imageCover",
    "images",
    "startDates",
    "secretTour",
    "createdAt",
    "updatedAt",
)

# Body keys accepted on create/update; anything else is ignored.
WRITABLE_FIELDS = (
    "name",
    "duration",
    "maxGroupSize",
    "difficulty",
    "ratingsAverage",
    "ratingsQuantity",
    "price",
    "priceDiscount",
    "summary",
    "description",
    "imageCover",
    "images",
    "startDates",
    "secretTour",
)

TOP_CHEAP_PRESET = {
    "limit": "5",
    "sort": "-ratingsAverage,price",
    "fields": "name,price,ratingsAverage,summary,difficulty",
}

NOT_FOUND = "No tour found with that ID"


# ---------- small helpers ----------

def tour_to_dict(tour: Tour, fields=TOUR_FIELDS):
    """
    Serialize only `fields`; reading a deferred column would hit the
    database from async code.
    """
    data = {}
    for name in fields:
        value = getattr(tour, Tour.API_FIELDS.get(name, name))
        if name == "id":
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        data[name] = value
    if "duration" in fields:
        data["durationWeeks"] = tour.duration_weeks
    return data


def apply_body(tour: Tour, data):
    for name in WRITABLE_FIELDS:
        if name in data:
            setattr(tour, Tour.API_FIELDS.get(name, name), data[name])
    return tour


async def _list_tours(params):
    spec = (
        QueryBuilder(params, max_limit=settings.API_MAX_PAGE_LIMIT)
        .filter()
        .sort()
        .limit_fields()
        .paginate()
        .build()
    )
    fields = projected_fields(TOUR_FIELDS, spec)

    with translate_storage_errors():
        queryset = apply_spec(Tour.objects.visible(), spec)
        tours = [tour async for tour in queryset]

    return JsonResponse(
        {
            "status": "success",
            "results": len(tours),
            "data": {"tours": [tour_to_dict(t, fields) for t in tours]},
        },
        status=200,
    )


# ---------- views ----------

@csrf_exempt
@protect(roles=STAFF, methods={"POST"})
async def tours_view(request):
    """
    GET  /api/v1/tours/?duration[gte]=5&sort=-ratingsAverage,price&fields=name,price&page=1&limit=10
    POST /api/v1/tours/   (admin, lead-guide)
    """
    allow_methods(request, "GET", "POST")

    if request.method == "GET":
        return await _list_tours(query_params(request))

    tour = apply_body(Tour(), json_body(request))
    await asave_instance(tour)

    return JsonResponse(
        {"status": "success", "data": {"tour": tour_to_dict(tour)}},
        status=201,
    )


@csrf_exempt
async def top_cheap_tours_view(request):
    """
    GET /api/v1/tours/top-5-cheap/

    Best rated first, cheapest first among equals.
    """
    allow_methods(request, "GET")
    return await _list_tours({**query_params(request), **TOP_CHEAP_PRESET})


@csrf_exempt
@protect(roles=STAFF, methods={"PATCH", "DELETE"})
async def tour_detail_view(request, tour_id):
    """
    GET    /api/v1/tours/<id>/
    PATCH  /api/v1/tours/<id>/   (admin, lead-guide)
    DELETE /api/v1/tours/<id>/   (admin, lead-guide)
    """
    allow_methods(request, "GET", "PATCH", "DELETE")

    tour = await aget_or_404(Tour.objects.visible(), NOT_FOUND, pk=tour_id)

    if request.method == "DELETE":
        await tour.adelete()
        return HttpResponse(status=204)

    if request.method == "PATCH":
        apply_body(tour, json_body(request))
        await asave_instance(tour)

    return JsonResponse(
        {"status": "success", "data": {"tour": tour_to_dict(tour)}},
        status=200,
    )
