"""
URL configuration for the storefront core
"""

from django.urls import include, path

from apps.settings.views import product_card_settings_api

urlpatterns = [
    # Public storefront API
    path("api/public/product-card-settings/", product_card_settings_api, name="product_card_settings"),
    # User role and permission API
    path("api/users/", include("apps.users.urls")),
    # Settings administration (permission checked per endpoint)
    path("app/settings/", include("apps.settings.urls")),
]
