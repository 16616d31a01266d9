import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _timestamps():
    return [
        ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
    ]


def _score():
    return models.PositiveSmallIntegerField(
        default=1,
        validators=[
            django.core.validators.MinValueValidator(1),
            django.core.validators.MaxValueValidator(5),
        ],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Risk",
            fields=_timestamps() + [
                ("reference", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("inherent_likelihood", _score()),
                ("inherent_impact", _score()),
                ("residual_likelihood", _score()),
                ("residual_impact", _score()),
                ("review_frequency_days", models.PositiveIntegerField(default=90)),
                ("review_requested", models.BooleanField(default=False)),
                ("last_reviewed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="owned_risks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"db_table": "registers_risk", "ordering": ["reference"]},
        ),
        migrations.CreateModel(
            name="Control",
            fields=_timestamps() + [
                ("control_ref", models.CharField(max_length=32, unique=True)),
                ("control_name", models.CharField(max_length=255)),
                ("control_description", models.TextField(blank=True, default="")),
                (
                    "consumer_duty_outcome",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("PRODUCTS_AND_SERVICES", "Products and services"),
                            ("PRICE_AND_VALUE", "Price and value"),
                            ("CONSUMER_UNDERSTANDING", "Consumer understanding"),
                            ("CONSUMER_SUPPORT", "Consumer support"),
                            ("GOVERNANCE_CULTURE_OVERSIGHT", "Governance, culture and oversight"),
                        ],
                        max_length=64,
                        null=True,
                    ),
                ),
                (
                    "control_frequency",
                    models.CharField(
                        choices=[
                            ("DAILY", "Daily"),
                            ("WEEKLY", "Weekly"),
                            ("MONTHLY", "Monthly"),
                            ("QUARTERLY", "Quarterly"),
                            ("BI_ANNUAL", "Bi-annual"),
                            ("ANNUAL", "Annual"),
                            ("EVENT_DRIVEN", "Event driven"),
                        ],
                        default="MONTHLY",
                        max_length=32,
                    ),
                ),
                (
                    "control_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("PREVENTATIVE", "Preventative"),
                            ("DETECTIVE", "Detective"),
                            ("CORRECTIVE", "Corrective"),
                            ("DIRECTIVE", "Directive"),
                        ],
                        max_length=32,
                        null=True,
                    ),
                ),
                (
                    "internal_or_third_party",
                    models.CharField(
                        choices=[("INTERNAL", "Internal"), ("THIRD_PARTY", "Third party")],
                        default="INTERNAL",
                        max_length=32,
                    ),
                ),
                ("standing_comments", models.TextField(blank=True, default="")),
                ("business_area", models.CharField(blank=True, default="", max_length=128)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "control_owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="owned_controls",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"db_table": "registers_control", "ordering": ["control_ref"]},
        ),
        migrations.CreateModel(
            name="Action",
            fields=_timestamps() + [
                ("reference", models.CharField(max_length=32, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("OPEN", "Open"),
                            ("IN_PROGRESS", "In Progress"),
                            ("COMPLETED", "Completed"),
                            ("OVERDUE", "Overdue"),
                            ("PROPOSED_CLOSED", "Proposed Closed"),
                        ],
                        db_index=True,
                        default="OPEN",
                        max_length=32,
                    ),
                ),
                ("due_date", models.DateField(blank=True, db_index=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_actions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"db_table": "registers_action", "ordering": ["reference"]},
        ),
        migrations.CreateModel(
            name="ConductBreach",
            fields=_timestamps() + [
                ("reference", models.CharField(max_length=32, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("OPEN", "Open"),
                            ("UNDER_INVESTIGATION", "Under investigation"),
                            ("CLOSED", "Closed"),
                        ],
                        db_index=True,
                        default="OPEN",
                        max_length=32,
                    ),
                ),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={"db_table": "registers_conduct_breach", "ordering": ["reference"]},
        ),
    ]
