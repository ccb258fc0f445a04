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

DISPUTE_FIELDS = [
    ("dispute_reason", models.CharField(
        blank=True,
        choices=[
            ("non_completion", "Swap Not Completed"),
            ("poor_quality", "Poor Quality"),
            ("misrepresentation", "Misrepresented Offer"),
            ("payment_issue", "Payment Issue"),
            ("other", "Other"),
        ],
        max_length=30,
    )),
    ("dispute_description", models.TextField(blank=True, max_length=2000)),
    ("dispute_raised_at", models.DateTimeField(blank=True, null=True)),
    ("dispute_status", models.CharField(
        blank=True,
        choices=[
            ("open", "Open"),
            ("under_review", "Under Review"),
            ("resolved", "Resolved"),
            ("closed", "Closed"),
        ],
        max_length=20,
    )),
    ("dispute_resolution", models.TextField(blank=True)),
    ("dispute_resolved_at", models.DateTimeField(blank=True, null=True)),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("swap_offers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SwapRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=0, editable=False)),
                *DISPUTE_FIELDS,
                ("return_title", models.CharField(blank=True, max_length=200)),
                ("return_description", models.TextField(blank=True, max_length=1000)),
                ("return_category", models.CharField(blank=True, choices=CATEGORY_CHOICES, max_length=20)),
                ("return_value_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("return_value_currency", models.CharField(default="USD", max_length=3)),
                ("return_duration", models.CharField(blank=True, max_length=100)),
                ("return_available_from", models.DateTimeField(blank=True, null=True)),
                ("return_available_until", models.DateTimeField(blank=True, null=True)),
                ("message", models.TextField(max_length=1000)),
                ("proposed_terms", models.TextField(blank=True, max_length=1000)),
                ("proposed_start_date", models.DateTimeField(blank=True, null=True)),
                ("proposed_end_date", models.DateTimeField(blank=True, null=True)),
                ("actual_start_date", models.DateTimeField(blank=True, null=True)),
                ("actual_end_date", models.DateTimeField(blank=True, null=True)),
                ("check_in_date", models.DateField(blank=True, null=True)),
                ("check_out_date", models.DateField(blank=True, null=True)),
                (
                    "number_of_guests",
                    models.PositiveSmallIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("special_requests", models.TextField(blank=True, max_length=500)),
                ("is_urgent", models.BooleanField(default=False)),
                (
                    "priority",
                    models.CharField(
                        choices=[("low", "Low"), ("medium", "Medium"), ("high", "High")],
                        default="medium",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("accepted", "Accepted"),
                            ("rejected", "Rejected"),
                            ("negotiating", "Negotiating"),
                            ("confirmed", "Confirmed"),
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
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("completion_notes", models.TextField(blank=True, max_length=1000)),
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
                    "offer",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="swap_requests",
                        to="swap_offers.swapoffer",
                    ),
                ),
                (
                    "offer_owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_swap_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "requester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_swap_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "swap request",
                "db_table": "swap_requests",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["requester", "status"], name="swap_reques_request_3e4f5a_idx"),
                    models.Index(fields=["offer_owner", "status"], name="swap_reques_offer_o_6b7c8d_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("status__in", ["pending", "accepted", "negotiating", "confirmed", "in_progress"])
                        ),
                        fields=("requester", "offer"),
                        name="unique_active_swap_request",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RequestMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sequence", models.PositiveIntegerField()),
                ("body", models.TextField(max_length=2000)),
                ("is_read", models.BooleanField(default=False)),
                (
                    "request",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="swap_requests.swaprequest",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "swap_request_messages",
                "ordering": ["request", "sequence"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("request", "sequence"), name="unique_request_message_sequence"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RequestNegotiation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sequence", models.PositiveIntegerField()),
                ("changes", models.TextField(max_length=1000)),
                (
                    "status",
                    models.CharField(
                        choices=[("proposed", "Proposed"), ("accepted", "Accepted"), ("rejected", "Rejected")],
                        default="proposed",
                        max_length=10,
                    ),
                ),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "proposed_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "request",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="negotiations",
                        to="swap_requests.swaprequest",
                    ),
                ),
                (
                    "responded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "swap_request_negotiations",
                "ordering": ["request", "sequence"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("request", "sequence"), name="unique_request_negotiation_sequence"
                    ),
                ],
            },
        ),
    ]
