from django.urls import path
from . import views

urlpatterns = [
    path("", views.users_view, name="users"),
    path("me/", views.me_view, name="users-me"),
    path("update-me/", views.update_me_view, name="users-update-me"),
    path("delete-me/", views.delete_me_view, name="users-delete-me"),
    path("<str:user_id>/", views.user_detail_view, name="user-detail"),
]
