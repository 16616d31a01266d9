# cg_core/registers/models.py
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from cg_core.common.models import UUIDModel

SCORE_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class ActionStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    IN_PROGRESS = "IN_PROGRESS", "In Progress"
    COMPLETED = "COMPLETED", "Completed"
    OVERDUE = "OVERDUE", "Overdue"
    PROPOSED_CLOSED = "PROPOSED_CLOSED", "Proposed Closed"


class ControlFrequency(models.TextChoices):
    DAILY = "DAILY", "Daily"
    WEEKLY = "WEEKLY", "Weekly"
    MONTHLY = "MONTHLY", "Monthly"
    QUARTERLY = "QUARTERLY", "Quarterly"
    BI_ANNUAL = "BI_ANNUAL", "Bi-annual"
    ANNUAL = "ANNUAL", "Annual"
    EVENT_DRIVEN = "EVENT_DRIVEN", "Event driven"


class ControlType(models.TextChoices):
    PREVENTATIVE = "PREVENTATIVE", "Preventative"
    DETECTIVE = "DETECTIVE", "Detective"
    CORRECTIVE = "CORRECTIVE", "Corrective"
    DIRECTIVE = "DIRECTIVE", "Directive"


class InternalOrThirdParty(models.TextChoices):
    INTERNAL = "INTERNAL", "Internal"
    THIRD_PARTY = "THIRD_PARTY", "Third party"


class ConsumerDutyOutcome(models.TextChoices):
    PRODUCTS_AND_SERVICES = "PRODUCTS_AND_SERVICES", "Products and services"
    PRICE_AND_VALUE = "PRICE_AND_VALUE", "Price and value"
    CONSUMER_UNDERSTANDING = "CONSUMER_UNDERSTANDING", "Consumer understanding"
    CONSUMER_SUPPORT = "CONSUMER_SUPPORT", "Consumer support"
    GOVERNANCE_CULTURE_OVERSIGHT = "GOVERNANCE_CULTURE_OVERSIGHT", "Governance, culture and oversight"


class BreachStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    UNDER_INVESTIGATION = "UNDER_INVESTIGATION", "Under investigation"
    CLOSED = "CLOSED", "Closed"


class Risk(UUIDModel):
    reference = models.CharField(max_length=32, unique=True)  # e.g. "R0007"
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="owned_risks",
        null=True,
        blank=True,
    )

    inherent_likelihood = models.PositiveSmallIntegerField(default=1, validators=SCORE_VALIDATORS)
    inherent_impact = models.PositiveSmallIntegerField(default=1, validators=SCORE_VALIDATORS)
    residual_likelihood = models.PositiveSmallIntegerField(default=1, validators=SCORE_VALIDATORS)
    residual_impact = models.PositiveSmallIntegerField(default=1, validators=SCORE_VALIDATORS)

    review_frequency_days = models.PositiveIntegerField(default=90)
    review_requested = models.BooleanField(default=False)
    last_reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "registers_risk"
        ordering = ["reference"]

    @property
    def inherent_score(self) -> int:
        return self.inherent_likelihood * self.inherent_impact

    @property
    def residual_score(self) -> int:
        return self.residual_likelihood * self.residual_impact

    def __str__(self) -> str:
        return f"{self.reference} {self.name}"


class Control(UUIDModel):
    control_ref = models.CharField(max_length=32, unique=True)  # e.g. "CTRL-012"
    control_name = models.CharField(max_length=255)
    control_description = models.TextField(blank=True, default="")

    control_owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="owned_controls",
        null=True,
        blank=True,
    )

    consumer_duty_outcome = models.CharField(
        max_length=64, choices=ConsumerDutyOutcome.choices, null=True, blank=True
    )
    control_frequency = models.CharField(
        max_length=32, choices=ControlFrequency.choices, default=ControlFrequency.MONTHLY
    )
    control_type = models.CharField(max_length=32, choices=ControlType.choices, null=True, blank=True)
    internal_or_third_party = models.CharField(
        max_length=32, choices=InternalOrThirdParty.choices, default=InternalOrThirdParty.INTERNAL
    )
    standing_comments = models.TextField(blank=True, default="")
    business_area = models.CharField(max_length=128, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "registers_control"
        ordering = ["control_ref"]

    def __str__(self) -> str:
        return f"{self.control_ref} {self.control_name}"


class Action(UUIDModel):
    reference = models.CharField(max_length=32, unique=True)  # e.g. "ACT-031"
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=32,
        choices=ActionStatus.choices,
        default=ActionStatus.OPEN,
        db_index=True,
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="assigned_actions",
        null=True,
        blank=True,
    )
    due_date = models.DateField(null=True, blank=True, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "registers_action"
        ordering = ["reference"]

    def __str__(self) -> str:
        return f"{self.reference} {self.title}"


class ConductBreach(UUIDModel):
    """
    SM&CR conduct rule breach. Governed by manage:smcr rather than can:approve-entities.
    """
    reference = models.CharField(max_length=32, unique=True)  # e.g. "BRE-004"
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=32,
        choices=BreachStatus.choices,
        default=BreachStatus.OPEN,
        db_index=True,
    )
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "registers_conduct_breach"
        ordering = ["reference"]

    def __str__(self) -> str:
        return f"{self.reference} {self.title}"
