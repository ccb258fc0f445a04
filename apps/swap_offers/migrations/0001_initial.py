import decimal

import django.core.validators
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
            name="SwapOffer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("skill", "Skill"),
                            ("service", "Service"),
                            ("accommodation", "Accommodation"),
                            ("item", "Item"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("subcategory", models.CharField(blank=True, max_length=100)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(max_length=2000)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("wants_in_return", models.TextField(blank=True, max_length=1000)),
                ("preferred_categories", models.JSONField(blank=True, default=list)),
                (
                    "estimated_value_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                ("estimated_value_currency", models.CharField(default="USD", max_length=3)),
                ("estimated_value_is_flexible", models.BooleanField(default=True)),
                (
                    "skill_level",
                    models.CharField(
                        choices=[
                            ("beginner", "Beginner"),
                            ("intermediate", "Intermediate"),
                            ("advanced", "Advanced"),
                            ("expert", "Expert"),
                        ],
                        default="intermediate",
                        max_length=20,
                    ),
                ),
                ("experience", models.CharField(blank=True, max_length=500)),
                ("available_from", models.DateTimeField(blank=True, null=True)),
                ("available_until", models.DateTimeField(blank=True, null=True)),
                ("is_recurring", models.BooleanField(default=False)),
                ("accommodation", models.JSONField(blank=True, null=True)),
                ("views", models.PositiveIntegerField(default=0)),
                ("requests", models.PositiveIntegerField(default=0)),
                (
                    "rating_average",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        max_digits=3,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("rating_count", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("paused", "Paused"),
                            ("completed", "Completed"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("is_public", models.BooleanField(default=True)),
                ("is_verified", models.BooleanField(default=False)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="swap_offers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "swap offer",
                "db_table": "swap_offers",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["category", "status"], name="swap_offers_categor_1f2e3d_idx"),
                    models.Index(fields=["owner", "status"], name="swap_offers_owner_i_4c5b6a_idx"),
                    models.Index(fields=["-rating_average"], name="swap_offers_rating__7d8e9f_idx"),
                    models.Index(fields=["-views"], name="swap_offers_views_0a1b2c_idx"),
                ],
            },
        ),
    ]
