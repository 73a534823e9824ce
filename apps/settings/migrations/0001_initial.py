import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Setting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "key",
                    models.CharField(
                        help_text='Unique setting identifier (e.g., "product_card_showBrand")',
                        max_length=100,
                        unique=True,
                        verbose_name="Key",
                    ),
                ),
                (
                    "value",
                    models.JSONField(
                        blank=True,
                        help_text="Stored value; sensitive values hold an ivHex:cipherTextHex envelope",
                        null=True,
                        verbose_name="Value",
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("GENERAL", "General"),
                            ("CONTACT", "Contact"),
                            ("SEO", "SEO"),
                            ("SHIPPING", "Shipping"),
                            ("EMAIL", "Email"),
                            ("PAYMENT", "Payment"),
                            ("SOCIAL", "Social"),
                            ("PRODUCT_CARD", "Product Card"),
                        ],
                        default="GENERAL",
                        help_text="Setting category for organization",
                        max_length=20,
                        verbose_name="Category",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True, help_text="When this setting was last updated", verbose_name="Updated At"
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Updated By",
                    ),
                ),
            ],
            options={
                "verbose_name": "Setting",
                "verbose_name_plural": "Settings",
                "ordering": ["category", "key"],
                "indexes": [
                    models.Index(fields=["category"], name="settings_category_idx"),
                    models.Index(fields=["updated_at"], name="settings_updated_at_idx"),
                ],
            },
        ),
    ]
