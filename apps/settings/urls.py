"""
URL Configuration for Storefront Settings (admin console)
"""

from __future__ import annotations

from django.urls import path

from . import views

app_name = "settings"

urlpatterns = [
    path("api/health/", views.settings_health_check, name="health_check"),
    path("api/cache/clear/", views.clear_cache_api, name="clear_cache"),
    path("api/", views.SettingsAPIView.as_view(), name="settings_api"),
    path("api/<str:key>/", views.SettingsAPIView.as_view(), name="setting_detail_api"),
]
