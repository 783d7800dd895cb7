from django.urls import path
from . import views

urlpatterns = [
    path("", views.tours_view, name="tours"),
    path("top-5-cheap/", views.top_cheap_tours_view, name="tours-top-5-cheap"),
    path("<str:tour_id>/", views.tour_detail_view, name="tour-detail"),
]
