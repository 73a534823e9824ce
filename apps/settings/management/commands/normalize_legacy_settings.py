"""
Django management command to rewrite legacy setting encodings
Boolean flags stored as {"enabled": bool} become "true"/"false".
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from apps.settings.exceptions import UnrecognizedSettingFormatError
from apps.settings.services import get_settings_service


class Command(BaseCommand):
    """🧹 Normalize legacy setting formats"""

    help = "Rewrite settings stored in a legacy format to their canonical form"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the settings that would be rewritten without changing them",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        dry_run = options.get("dry_run", False)

        try:
            keys = get_settings_service().normalize_legacy_settings(dry_run=dry_run)
        except UnrecognizedSettingFormatError as e:
            raise CommandError(f"❌ {e}") from e

        if not keys:
            self.stdout.write(self.style.SUCCESS("✅ No legacy settings found"))
            return

        for key in keys:
            self.stdout.write(f"  🔄 {key}")

        if dry_run:
            self.stdout.write(self.style.WARNING(f"⚠️ Dry run: {len(keys)} settings would be normalized"))
        else:
            self.stdout.write(self.style.SUCCESS(f"✅ Normalized {len(keys)} settings"))
