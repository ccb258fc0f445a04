import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

CATEGORY_CHOICES = [
    ("skill", "Skill"),
    ("service", "Service"),
    ("accommodation", "Accommodation"),
    ("item", "Item"),
    ("other", "Other"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("swap_requests", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SwapTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=0, editable=False)),
                (
                    "dispute_reason",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("non_completion", "Swap Not Completed"),
                            ("poor_quality", "Poor Quality"),
                            ("misrepresentation", "Misrepresented Offer"),
                            ("payment_issue", "Payment Issue"),
                            ("other", "Other"),
                        ],
                        max_length=30,
                    ),
                ),
                ("dispute_description", models.TextField(blank=True, max_length=2000)),
                ("dispute_raised_at", models.DateTimeField(blank=True, null=True)),
                (
                    "dispute_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("open", "Open"),
                            ("under_review", "Under Review"),
                            ("resolved", "Resolved"),
                            ("closed", "Closed"),
                        ],
                        max_length=20,
                    ),
                ),
                ("dispute_resolution", models.TextField(blank=True)),
                ("dispute_resolved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("skill_swap", "Skill swap"),
                            ("service_swap", "Service swap"),
                            ("accommodation_swap", "Accommodation swap"),
                            ("item_swap", "Item swap"),
                            ("mixed", "Mixed"),
                        ],
                        default="mixed",
                        max_length=30,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("disputed", "Disputed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("start_date", models.DateTimeField(blank=True, null=True)),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                ("actual_start_date", models.DateTimeField(blank=True, null=True)),
                ("actual_end_date", models.DateTimeField(blank=True, null=True)),
                ("value_total", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=14)),
                ("value_difference", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=14)),
                ("is_balanced", models.BooleanField(default=True)),
                ("value_currency", models.CharField(default="USD", max_length=3)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("completion_notes", models.TextField(blank=True, max_length=1000)),
                ("notes", models.TextField(blank=True, max_length=1000)),
                (
                    "completed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "dispute_raised_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Participant who raised the dispute",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "dispute_resolved_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Moderator who handled the dispute",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "request",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transaction",
                        to="swap_requests.swaprequest",
                    ),
                ),
            ],
            options={
                "verbose_name": "swap transaction",
                "db_table": "swap_transactions",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="TransactionParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "role",
                    models.CharField(
                        choices=[("requester", "Requester"), ("offer_owner", "Offer owner")],
                        max_length=20,
                    ),
                ),
                ("offered_title", models.CharField(blank=True, max_length=200)),
                ("offered_description", models.TextField(blank=True, max_length=2000)),
                ("offered_category", models.CharField(blank=True, choices=CATEGORY_CHOICES, max_length=20)),
                ("offered_value", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("offered_currency", models.CharField(default="USD", max_length=3)),
                ("received_title", models.CharField(blank=True, max_length=200)),
                ("received_description", models.TextField(blank=True, max_length=2000)),
                ("received_category", models.CharField(blank=True, choices=CATEGORY_CHOICES, max_length=20)),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="swap_transactions.swaptransaction",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="swap_participations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "swap_transaction_participants",
                "ordering": ["transaction", "role"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("transaction", "role"), name="unique_transaction_participant_role"
                    ),
                    models.UniqueConstraint(
                        fields=("transaction", "user"), name="unique_transaction_participant_user"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionFeedback",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "rating",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("comment", models.TextField(blank=True, max_length=500)),
                ("categories", models.JSONField(blank=True, default=list)),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("is_verified", models.BooleanField(default=False)),
                (
                    "from_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="given_swap_feedback",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "to_user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_swap_feedback",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedback",
                        to="swap_transactions.swaptransaction",
                    ),
                ),
            ],
            options={
                "db_table": "swap_transaction_feedback",
                "ordering": ["-submitted_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("transaction", "from_user", "to_user"),
                        name="unique_transaction_feedback_pair",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionDeliverable",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, max_length=1000)),
                ("url", models.URLField(blank=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("document", "Document"), ("link", "Link"), ("photo", "Photo"), ("other", "Other")],
                        default="other",
                        max_length=20,
                    ),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="deliverables",
                        to="swap_transactions.swaptransaction",
                    ),
                ),
            ],
            options={
                "db_table": "swap_transaction_deliverables",
            },
        ),
    ]
