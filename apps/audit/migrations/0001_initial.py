import uuid

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
            name="RBACLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("actor_email", models.EmailField(max_length=254, verbose_name="Actor email")),
                ("target_email", models.EmailField(max_length=254, verbose_name="Target email")),
                (
                    "action",
                    models.CharField(
                        choices=[("PERMISSION_CHANGE", "Permission Change"), ("ROLE_CHANGE", "Role Change")],
                        db_index=True,
                        max_length=30,
                    ),
                ),
                ("old_value", models.JSONField(blank=True, null=True)),
                ("new_value", models.JSONField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("request_id", models.CharField(blank=True, db_index=True, max_length=36)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="rbac_actions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "target",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="rbac_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "RBAC Log",
                "verbose_name_plural": "RBAC Logs",
                "db_table": "audit_rbac_log",
                "ordering": ("-timestamp",),
                "indexes": [
                    models.Index(fields=["actor", "-timestamp"], name="audit_rbac_actor_ts_idx"),
                    models.Index(fields=["target", "-timestamp"], name="audit_rbac_target_ts_idx"),
                ],
            },
        ),
    ]
