"""
Storefront Settings Django App Configuration
"""

from __future__ import annotations

import atexit
import logging
from typing import TYPE_CHECKING, Any

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _

if TYPE_CHECKING:
    from .services import SettingsService

logger = logging.getLogger(__name__)


class SettingsConfig(AppConfig):
    """⚙️ Storefront Settings application configuration"""

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "apps.settings"
    label: str = "settings"
    verbose_name: Any = _("⚙️ Storefront Settings")  # _StrPromise from gettext_lazy

    service: SettingsService | None = None

    def ready(self) -> None:
        """Build the settings service once per process; a bad encryption key stops startup here."""
        from .services import build_settings_service  # noqa: PLC0415  # models must be loaded first

        self.service = build_settings_service()
        atexit.register(self._shutdown)
        logger.info("✅ [Settings] Settings service initialized")

    def _shutdown(self) -> None:
        if self.service is not None:
            self.service.close()
            self.service = None
