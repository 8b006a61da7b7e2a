import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

DOMAIN_CHOICES = [("ADMIN", "Admin"), ("WORKSHOP", "Workshop")]
SUBTYPE_CHOICES = [("HEADER", "Header"), ("NAV", "Nav"), ("FOOTER", "Footer")]
STATE_CHOICES = [("FULL", "Full"), ("RELAXED", "Relaxed"), ("COMPACT", "Compact")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("menu_item_text", models.CharField(max_length=255)),
                ("route_path", models.CharField(max_length=500)),
                ("tooltip_text", models.CharField(blank=True, default="", max_length=500)),
                ("nav_svg_path", models.CharField(blank=True, default="", max_length=500)),
                ("header_svg_path", models.CharField(blank=True, default="", max_length=500)),
                ("auth_required", models.BooleanField(default=False)),
                ("description", models.CharField(blank=True, default="No description provided", max_length=500)),
                ("domain", models.CharField(choices=DOMAIN_CHOICES, max_length=20)),
                ("structural_subtype", models.CharField(choices=SUBTYPE_CHOICES, max_length=20)),
                ("state", models.CharField(choices=STATE_CHOICES, max_length=20)),
                ("sort_id", models.PositiveIntegerField(default=1)),
                ("archived", models.BooleanField(db_index=True, default=False)),
                ("version", models.PositiveIntegerField(default=1)),
                ("last_updated", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="children",
                        to="menus.menuitem",
                    ),
                ),
            ],
            options={
                "ordering": ["domain", "structural_subtype", "state", "sort_id", "id"],
                "indexes": [
                    models.Index(
                        fields=["domain", "structural_subtype", "state", "sort_id"],
                        name="menuitem_partition_sort_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("domain", "structural_subtype", "state", "route_path"),
                        name="menuitem_unique_route_per_partition",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="HistoricalMenuItem",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                ("menu_item_text", models.CharField(max_length=255)),
                ("route_path", models.CharField(max_length=500)),
                ("tooltip_text", models.CharField(blank=True, default="", max_length=500)),
                ("nav_svg_path", models.CharField(blank=True, default="", max_length=500)),
                ("header_svg_path", models.CharField(blank=True, default="", max_length=500)),
                ("auth_required", models.BooleanField(default=False)),
                ("description", models.CharField(blank=True, default="No description provided", max_length=500)),
                ("domain", models.CharField(choices=DOMAIN_CHOICES, max_length=20)),
                ("structural_subtype", models.CharField(choices=SUBTYPE_CHOICES, max_length=20)),
                ("state", models.CharField(choices=STATE_CHOICES, max_length=20)),
                ("sort_id", models.PositiveIntegerField(default=1)),
                ("archived", models.BooleanField(db_index=True, default=False)),
                ("version", models.PositiveIntegerField(default=1)),
                ("last_updated", models.DateTimeField(default=django.utils.timezone.now)),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="menus.menuitem",
                    ),
                ),
            ],
            options={
                "verbose_name": "historical menu item",
                "verbose_name_plural": "historical menu items",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
