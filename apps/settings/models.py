"""
Storefront settings models
Key/value configuration rows; sensitive values hold an encrypted envelope.
"""

from __future__ import annotations

from typing import ClassVar

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class SettingCategory(models.TextChoices):
    """🏷️ Setting categories used by the admin console"""

    GENERAL = "GENERAL", _("General")
    CONTACT = "CONTACT", _("Contact")
    SEO = "SEO", _("SEO")
    SHIPPING = "SHIPPING", _("Shipping")
    EMAIL = "EMAIL", _("Email")
    PAYMENT = "PAYMENT", _("Payment")
    SOCIAL = "SOCIAL", _("Social")
    PRODUCT_CARD = "PRODUCT_CARD", _("Product Card")


class Setting(models.Model):
    """⚙️ One storefront setting (string or structured JSON value)"""

    key = models.CharField(
        _("Key"),
        max_length=100,
        unique=True,
        help_text=_('Unique setting identifier (e.g., "product_card_showBrand")'),
    )

    value = models.JSONField(
        _("Value"),
        null=True,
        blank=True,
        help_text=_("Stored value; sensitive values hold an ivHex:cipherTextHex envelope"),
    )

    category = models.CharField(
        _("Category"),
        max_length=20,
        choices=SettingCategory.choices,
        default=SettingCategory.GENERAL,
        help_text=_("Setting category for organization"),
    )

    updated_at = models.DateTimeField(_("Updated At"), auto_now=True, help_text=_("When this setting was last updated"))

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Updated By"),
    )

    class Meta:
        verbose_name = _("Setting")
        verbose_name_plural = _("Settings")
        ordering: ClassVar = ["category", "key"]
        indexes: ClassVar = [
            models.Index(fields=["category"], name="settings_category_idx"),
            models.Index(fields=["updated_at"], name="settings_updated_at_idx"),
        ]

    def __str__(self) -> str:
        return f"⚙️ {self.key}"
