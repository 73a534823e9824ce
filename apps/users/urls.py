"""
URL configuration for the user permission API
"""

from django.urls import path

from . import views

app_name = "users"

urlpatterns = [
    path("me/permissions/", views.my_permissions_api, name="my_permissions"),
    path("<int:user_id>/permissions/", views.update_user_permissions_api, name="update_permissions"),
    path("<int:user_id>/role/", views.update_user_role_api, name="update_role"),
]
