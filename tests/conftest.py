# ===============================================================================
# PYTEST CONFIGURATION FOR THE STOREFRONT CORE
# ===============================================================================
"""
Global test configuration.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- tests/mocks/ holds test doubles (in-memory cache backend)
- Naming convention: test_{feature}.py

Run all tests: pytest tests/
"""

import os

import django


def pytest_configure():
    """Configure Django settings for pytest"""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.test')

    # Configure Django
    django.setup()

# ===============================================================================
# PYTEST FIXTURES
# ===============================================================================

import pytest  # noqa: E402

from apps.settings.services import get_settings_service  # noqa: E402
from apps.users.models import User  # noqa: E402
from apps.users.permissions import Role  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Every test starts with an empty, healthy settings cache"""
    backend = get_settings_service().cache.backend
    backend.reset()
    yield backend
    backend.reset()


@pytest.fixture
def settings_service():
    return get_settings_service()


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(email='super@example.com', password='testpass123', role=Role.SUPER_ADMIN)


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(email='admin@example.com', password='testpass123', role=Role.ADMIN)


@pytest.fixture
def viewer_user(db):
    return User.objects.create_user(email='viewer@example.com', password='testpass123', role=Role.VIEWER)
