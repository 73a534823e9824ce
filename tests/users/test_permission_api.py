"""
Tests for the user role and permission API
"""

import json

from django.test import TestCase
from django.urls import reverse

from apps.audit.models import RBACLog
from apps.users.models import User
from apps.users.permissions import ROLE_PERMISSIONS, Role
from apps.users.services import UserPermissionService


class MyPermissionsAPITests(TestCase):
    """👤 Current user's permissions"""

    def test_requires_authentication(self):
        response = self.client.get(reverse("users:my_permissions"))

        self.assertIn(response.status_code, (401, 403))

    def test_returns_effective_permissions(self):
        user = User.objects.create_user(email="viewer@example.com", password="pw", role=Role.VIEWER)
        self.client.force_login(user)

        response = self.client.get(reverse("users:my_permissions"))

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["role"], Role.VIEWER)
        self.assertEqual(data["role_level"], 10)
        self.assertEqual(data["permissions"], [])
        self.assertEqual(data["effective_permissions"], sorted(ROLE_PERMISSIONS[Role.VIEWER]))
        self.assertIn("no-store", response["Cache-Control"])


class UpdatePermissionsAPITests(TestCase):
    """🔐 PATCH /api/users/<id>/permissions/"""

    def setUp(self):
        self.super_admin = User.objects.create_user(email="super@example.com", password="pw", role=Role.SUPER_ADMIN)
        self.admin = User.objects.create_user(email="admin@example.com", password="pw", role=Role.ADMIN)
        self.viewer = User.objects.create_user(email="viewer@example.com", password="pw", role=Role.VIEWER)

    def _patch(self, user, data):
        return self.client.patch(
            reverse("users:update_permissions", kwargs={"user_id": user.pk}),
            data=json.dumps(data),
            content_type="application/json",
        )

    def test_super_admin_replaces_grants(self):
        self.client.force_login(self.super_admin)

        response = self._patch(self.viewer, {"permissions": ["homepage.edit", "homepage.edit"]})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["effective_permissions"], ["homepage.edit"])
        self.viewer.refresh_from_db()
        self.assertEqual(self.viewer.permissions, ["homepage.edit"])

        log = RBACLog.objects.get(target=self.viewer)
        self.assertEqual(log.action, RBACLog.PERMISSION_CHANGE)
        self.assertEqual(log.old_value, {"permissions": []})
        self.assertEqual(log.new_value, {"permissions": ["homepage.edit"]})
        self.assertEqual(log.actor_email, "super@example.com")
        self.assertTrue(log.request_id)

    def test_admin_lacks_edit_permissions(self):
        self.client.force_login(self.admin)

        response = self._patch(self.viewer, {"permissions": ["homepage.edit"]})

        self.assertEqual(response.status_code, 403)
        self.assertFalse(RBACLog.objects.exists())

    def test_invalid_permissions_are_listed(self):
        self.client.force_login(self.super_admin)

        response = self._patch(self.viewer, {"permissions": ["homepage.edit", "rockets.launch"]})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["invalid_permissions"], ["rockets.launch"])

    def test_permissions_must_be_a_list(self):
        self.client.force_login(self.super_admin)

        self.assertEqual(self._patch(self.viewer, {"permissions": "homepage.edit"}).status_code, 400)

    def test_unknown_user(self):
        self.client.force_login(self.super_admin)

        response = self.client.patch(
            reverse("users:update_permissions", kwargs={"user_id": 99999}),
            data=json.dumps({"permissions": []}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 404)


class UpdateRoleAPITests(TestCase):
    """🎭 PATCH /api/users/<id>/role/"""

    def setUp(self):
        self.super_admin = User.objects.create_user(email="super@example.com", password="pw", role=Role.SUPER_ADMIN)
        self.staff = User.objects.create_user(
            email="staff@example.com", password="pw", role=Role.STAFF, permissions=["users.manage_roles"]
        )
        self.viewer = User.objects.create_user(
            email="viewer@example.com", password="pw", role=Role.VIEWER, permissions=["homepage.edit"]
        )

    def _patch(self, user, role):
        return self.client.patch(
            reverse("users:update_role", kwargs={"user_id": user.pk}),
            data=json.dumps({"role": role}),
            content_type="application/json",
        )

    def test_role_change_resets_grants(self):
        self.client.force_login(self.super_admin)

        response = self._patch(self.viewer, Role.CONTENT_EDITOR)

        self.assertEqual(response.status_code, 200)
        self.viewer.refresh_from_db()
        self.assertEqual(self.viewer.role, Role.CONTENT_EDITOR)
        self.assertEqual(self.viewer.permissions, [])
        self.assertEqual(
            response.json()["data"]["effective_permissions"], sorted(ROLE_PERMISSIONS[Role.CONTENT_EDITOR])
        )

        log = RBACLog.objects.get(target=self.viewer, action=RBACLog.ROLE_CHANGE)
        self.assertEqual(log.old_value["role"], Role.VIEWER)
        self.assertEqual(log.old_value["permissions"], ["homepage.edit"])
        self.assertEqual(log.new_value["role_level"], 15)

    def test_cannot_change_own_role(self):
        self.client.force_login(self.super_admin)

        self.assertEqual(self._patch(self.super_admin, Role.VIEWER).status_code, 403)

    def test_invalid_role(self):
        self.client.force_login(self.super_admin)

        self.assertEqual(self._patch(self.viewer, "OVERLORD").status_code, 400)

    def test_cannot_assign_equal_or_higher_role(self):
        self.client.force_login(self.staff)

        self.assertEqual(self._patch(self.viewer, Role.STAFF).status_code, 403)
        self.assertEqual(self._patch(self.viewer, Role.CONTENT_EDITOR).status_code, 200)

    def test_cannot_manage_higher_user(self):
        self.client.force_login(self.staff)

        self.assertEqual(self._patch(self.super_admin, Role.VIEWER).status_code, 403)


class UserPermissionServiceTests(TestCase):
    """🔐 Service-level results"""

    def test_error_codes(self):
        viewer = User.objects.create_user(email="viewer@example.com", password="pw", role=Role.VIEWER)
        other = User.objects.create_user(email="other@example.com", password="pw", role=Role.VIEWER)

        result = UserPermissionService.update_permissions(viewer, other, ["products.view"])

        self.assertTrue(result.is_err())
        self.assertEqual(result.unwrap_err().code, "forbidden")

    def test_empty_list_restores_role_defaults(self):
        super_admin = User.objects.create_user(email="super@example.com", password="pw", role=Role.SUPER_ADMIN)
        viewer = User.objects.create_user(
            email="viewer@example.com", password="pw", role=Role.VIEWER, permissions=["homepage.edit"]
        )

        result = UserPermissionService.update_permissions(super_admin, viewer, [])

        self.assertTrue(result.is_ok())
        viewer.refresh_from_db()
        self.assertEqual(viewer.permissions, [])
