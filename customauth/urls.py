from django.urls import path
from . import views

urlpatterns = [
    path("signup/", views.signup_view, name="auth-signup"),
    path("login/", views.login_view, name="auth-login"),
    path("forgot-password/", views.forgot_password_view, name="auth-forgot-password"),
    path("reset-password/<str:token>/", views.reset_password_view, name="auth-reset-password"),
    path("update-password/", views.update_password_view, name="auth-update-password"),
]
