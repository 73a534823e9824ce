"""
Tests for the public product card endpoint and the admin settings API
"""

import json
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse

from apps.settings.exceptions import PersistentStoreError
from apps.settings.models import Setting, SettingCategory
from apps.settings.services import MASKED_VALUE, PRODUCT_CARD_FLAGS, get_settings_service
from apps.users.models import User
from apps.users.permissions import Role


class ProductCardSettingsAPITests(TestCase):
    """🃏 Public product card flags"""

    def setUp(self):
        self.url = reverse("product_card_settings")

    def test_returns_all_flags_without_caching_headers(self):
        Setting.objects.create(key="product_card_showOrigin", value={"enabled": False})

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(set(body["data"]), set(PRODUCT_CARD_FLAGS))
        self.assertIs(body["data"]["showOrigin"], False)
        self.assertIn("no-store", response["Cache-Control"])
        self.assertEqual(response["Pragma"], "no-cache")
        self.assertIn("X-Request-ID", response)

    def test_admin_change_visible_on_next_request(self):
        self.assertIs(self.client.get(self.url).json()["data"]["showOrigin"], True)

        get_settings_service().set_setting("product_card_showOrigin", False)

        self.assertIs(self.client.get(self.url).json()["data"]["showOrigin"], False)

    def test_store_failure_returns_500(self):
        with mock.patch(
            "apps.settings.store.DjangoSettingsStore.find_many_by_key_prefix",
            side_effect=PersistentStoreError("read", "product_card_*", DatabaseError("down")),
        ):
            response = self.client.get(self.url)

        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()["success"])

    def test_only_get_allowed(self):
        self.assertEqual(self.client.post(self.url).status_code, 405)


class SettingsHealthCheckTests(TestCase):
    def test_healthy(self):
        response = self.client.get(reverse("settings:health_check"))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertNotIn("sensitive_tokens", body["encryption"])


class SettingsAdminAPITests(TestCase):
    """⚙️ Admin settings API with permission checks"""

    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="pw", role=Role.SUPER_ADMIN)
        self.viewer = User.objects.create_user(email="viewer@example.com", password="pw", role=Role.VIEWER)
        self.settings_viewer = User.objects.create_user(
            email="auditor@example.com", password="pw", role=Role.VIEWER, permissions=["settings.view"]
        )
        self.service = get_settings_service()
        self.list_url = reverse("settings:settings_api")

    def _detail_url(self, key):
        return reverse("settings:setting_detail_api", kwargs={"key": key})

    def _put(self, url, data):
        return self.client.put(url, data=json.dumps(data), content_type="application/json")

    def test_anonymous_is_rejected(self):
        self.assertEqual(self.client.get(self.list_url).status_code, 401)

    def test_missing_permission_is_rejected(self):
        self.client.force_login(self.viewer)

        self.assertEqual(self.client.get(self.list_url).status_code, 403)
        self.assertEqual(self._put(self._detail_url("site_name"), {"value": "x"}).status_code, 403)

    def test_list_masks_sensitive_values(self):
        self.service.set_setting("email_smtp_password", "hunter2")
        self.service.set_setting("site_name", "Shop")
        self.client.force_login(self.settings_viewer)

        body = self.client.get(self.list_url).json()

        self.assertEqual(body["count"], 2)
        self.assertEqual(body["data"]["email_smtp_password"], MASKED_VALUE)
        self.assertEqual(body["data"]["site_name"], "Shop")

    def test_list_by_category(self):
        self.service.set_setting("email_from", "shop@example.com")
        self.service.set_setting("site_name", "Shop")
        self.client.force_login(self.settings_viewer)

        body = self.client.get(self.list_url, {"category": "email"}).json()

        self.assertEqual(body["data"], {"email_from": "shop@example.com"})

    def test_unknown_category_is_rejected(self):
        self.client.force_login(self.settings_viewer)

        self.assertEqual(self.client.get(self.list_url, {"category": "nope"}).status_code, 400)

    def test_detail(self):
        self.service.set_setting("payment_stripe_secret_key", "sk_test")
        self.client.force_login(self.admin)

        response = self.client.get(self._detail_url("payment_stripe_secret_key"))

        self.assertEqual(response.json()["data"], {"key": "payment_stripe_secret_key", "value": MASKED_VALUE})
        self.assertEqual(self.client.get(self._detail_url("unknown_key")).status_code, 404)

    def test_single_update(self):
        self.client.force_login(self.admin)

        response = self._put(self._detail_url("product_card_showOrigin"), {"value": False})

        self.assertEqual(response.status_code, 200)
        setting = Setting.objects.get(key="product_card_showOrigin")
        self.assertEqual(setting.value, "false")
        self.assertEqual(setting.category, SettingCategory.PRODUCT_CARD)
        self.assertEqual(setting.updated_by, self.admin)

    def test_single_update_validation(self):
        self.client.force_login(self.admin)

        self.assertEqual(self._put(self._detail_url("site_name"), {}).status_code, 400)
        self.assertEqual(
            self._put(self._detail_url("site_name"), {"value": "x", "category": "NOPE"}).status_code, 400
        )
        self.assertEqual(self._put(self._detail_url("product_card_showSku"), {"value": "maybe"}).status_code, 400)
        response = self.client.put(self._detail_url("site_name"), data="{not json", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    def test_bulk_update(self):
        self.client.force_login(self.admin)

        response = self._put(self.list_url, {"settings": {"site_name": "Shop", "product_card_showTags": False}})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["updated"], 2)
        self.assertIs(self.service.get_product_card_settings()["showTags"], False)

    def test_bulk_update_reports_invalid_entries(self):
        self.client.force_login(self.admin)

        response = self._put(self.list_url, {"settings": {"site_name": "Shop", "ecommerce_enabled": "sometimes"}})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["key"], "ecommerce_enabled")
        self.assertFalse(Setting.objects.exists())

    def test_clear_cache(self):
        self.service.set_setting("site_name", "Shop")
        self.service.get_setting("site_name")
        self.client.force_login(self.admin)

        response = self.client.post(reverse("settings:clear_cache"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["cleared"], 1)
        self.assertEqual(self.client.get(reverse("settings:clear_cache")).status_code, 405)
