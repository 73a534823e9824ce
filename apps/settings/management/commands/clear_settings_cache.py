"""
Django management command to drop every cached setting
Stored values are untouched; the next read repopulates the cache.
"""

from typing import Any

from django.core.management.base import BaseCommand

from apps.settings.services import get_settings_service


class Command(BaseCommand):
    """🧹 Clear the settings cache"""

    help = "Drop every cached setting so the next read loads fresh values"

    def handle(self, *args: Any, **options: Any) -> None:
        cleared = get_settings_service().clear_settings_cache()
        self.stdout.write(self.style.SUCCESS(f"🧹 Cleared {cleared} cached settings"))
