from django.http import JsonResponse


def not_found_view(request, exception=None):
    return JsonResponse(
        {"status": "fail", "message": f"Can't find {request.path} on this server!"},
        status=404,
    )


def server_error_view(request):
    return JsonResponse(
        {"status": "error", "message": "Something went very wrong!"},
        status=500,
    )
