"""
Django management command to encrypt sensitive settings stored in plaintext
Run once after enabling encryption on an existing database.
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandParser

from apps.settings.services import get_settings_service


class Command(BaseCommand):
    """🔒 Encrypt plaintext sensitive settings"""

    help = "Encrypt sensitive settings (passwords, secrets, tokens) that are still stored in plaintext"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the settings that would be encrypted without changing them",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        dry_run = options.get("dry_run", False)
        service = get_settings_service()

        if not service.cipher.encryption_status()["encryption_working"]:
            self.stdout.write(self.style.ERROR("❌ Encryption self-test failed, aborting"))
            return

        keys = service.encrypt_plaintext_settings(dry_run=dry_run)
        if not keys:
            self.stdout.write(self.style.SUCCESS("✅ All sensitive settings are already encrypted"))
            return

        for key in keys:
            self.stdout.write(f"  🔒 {key}")

        if dry_run:
            self.stdout.write(self.style.WARNING(f"⚠️ Dry run: {len(keys)} settings would be encrypted"))
        else:
            self.stdout.write(self.style.SUCCESS(f"✅ Encrypted {len(keys)} settings"))
