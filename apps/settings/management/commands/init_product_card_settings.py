"""
Django management command to create the product card display flags
Missing flags are created as visible; existing values are kept.
"""

from typing import Any

from django.core.management.base import BaseCommand

from apps.settings.codecs import PRODUCT_CARD_PREFIX
from apps.settings.services import PRODUCT_CARD_FLAGS, get_settings_service


class Command(BaseCommand):
    """🃏 Initialize product card settings"""

    help = "Create the product card display flags that do not exist yet"

    def handle(self, *args: Any, **options: Any) -> None:
        defaults = [(f"{PRODUCT_CARD_PREFIX}{flag}", True) for flag in PRODUCT_CARD_FLAGS]
        created = get_settings_service().seed_defaults(defaults)

        for key in created:
            self.stdout.write(f"  ✅ Created setting: {key} = true")

        self.stdout.write(self.style.SUCCESS("\n📊 Setup Summary:"))
        self.stdout.write(f"  • Created: {len(created)} settings")
        self.stdout.write(f"  • Skipped: {len(defaults) - len(created)} settings")
