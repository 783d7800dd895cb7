"""
URL configuration for the natours project.

Every API route lives under /api/v1/. Unknown paths and unhandled errors
answer in the same JSON shape as the API itself.
"""
from django.urls import path, include

urlpatterns = [
    path("", include("health.urls")),
    path("api/v1/auth/", include("customauth.urls")),
    path("api/v1/users/", include("userprofile.urls")),
    path("api/v1/tours/", include("tours.urls")),
]

handler404 = "core.views.not_found_view"
handler500 = "core.views.server_error_view"
