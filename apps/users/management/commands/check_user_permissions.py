"""
Django management command to show a user's role and effective permissions
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from apps.users.models import User
from apps.users.permissions import PERMISSION_DESCRIPTIONS, user_effective_permissions


class Command(BaseCommand):
    """🔐 Inspect a user's permissions"""

    help = "Show the role, explicit grants and effective permissions of a user"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("email", type=str, help="Email of the user to inspect")

    def handle(self, *args: Any, **options: Any) -> None:
        email = options["email"]
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist as e:
            raise CommandError(f"❌ User {email} not found") from e

        self.stdout.write(self.style.SUCCESS(f"👤 {user.email}"))
        self.stdout.write(f"  • Role: {user.role} (level {user.role_level})")
        if user.permissions:
            self.stdout.write(f"  • Explicit grants: {', '.join(user.permissions)}")
        else:
            self.stdout.write("  • Explicit grants: none, using role defaults")

        self.stdout.write("\n🔐 Effective permissions:")
        for permission in sorted(user_effective_permissions(user)):
            description = PERMISSION_DESCRIPTIONS.get(permission, "")
            self.stdout.write(f"  • {permission:<32} {description}")
