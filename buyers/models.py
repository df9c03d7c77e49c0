import uuid

from django.core.validators import MinValueValidator
from django.db import models

from authentication.models import UserIdentity


class PropertyType(models.TextChoices):
    APARTMENT = "Apartment"
    VILLA = "Villa"
    PLOT = "Plot"
    OFFICE = "Office"
    RETAIL = "Retail"


class BHK(models.TextChoices):
    ONE = "One"
    TWO = "Two"
    THREE = "Three"
    FOUR = "Four"
    STUDIO = "Studio"


class Purpose(models.TextChoices):
    BUY = "Buy"
    RENT = "Rent"


class Timeline(models.TextChoices):
    ZERO_TO_THREE_MONTHS = "0-3 months"
    THREE_TO_SIX_MONTHS = "3-6 months"
    MORE_THAN_SIX_MONTHS = ">6 months"
    EXPLORING = "Exploring"


class Source(models.TextChoices):
    WEBSITE = "Website"
    REFERRAL = "Referral"
    WALK_IN = "Walk-in"
    CALL = "Call"
    OTHER = "Other"


class Status(models.TextChoices):
    NEW = "New"
    QUALIFIED = "Qualified"
    CONTACTED = "Contacted"
    VISITED = "Visited"
    NEGOTIATION = "Negotiation"
    CONVERTED = "Converted"
    DROPPED = "Dropped"


# Property types that are residential units and therefore need a BHK configuration
BHK_REQUIRED_PROPERTY_TYPES = (PropertyType.APARTMENT, PropertyType.VILLA)


class Buyer(models.Model):
    """A prospective property buyer lead."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    full_name = models.CharField(max_length=80)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=15)
    city = models.CharField(max_length=255)
    property_type = models.CharField(max_length=20, choices=PropertyType.choices)
    bhk = models.CharField(max_length=10, choices=BHK.choices, blank=True, null=True)
    purpose = models.CharField(max_length=10, choices=Purpose.choices)
    budget_min = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    budget_max = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    timeline = models.CharField(max_length=20, choices=Timeline.choices)
    source = models.CharField(max_length=20, choices=Source.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.NEW)
    notes = models.TextField(max_length=1000, blank=True, null=True)
    tags = models.JSONField(default=list, blank=True)
    owner = models.ForeignKey(UserIdentity, on_delete=models.PROTECT, related_name="buyers")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["updated_at"], name="buyer_updated_at_idx"),
            models.Index(fields=["city"], name="buyer_city_idx"),
            models.Index(fields=["status"], name="buyer_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.phone})"


class BuyerHistory(models.Model):
    """Append-only audit entry for a create, update or delete of a buyer."""

    # No database constraint: the entry written for a deletion outlives its buyer
    buyer = models.ForeignKey(
        Buyer,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="histories",
    )
    changed_by = models.ForeignKey(
        UserIdentity,
        on_delete=models.SET_NULL,
        null=True,
        related_name="buyer_changes",
    )
    diff = models.JSONField(default=dict)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-changed_at", "-id"]
        verbose_name_plural = "buyer histories"
        indexes = [
            models.Index(fields=["buyer", "-changed_at"], name="buyer_history_recent_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.buyer_id} - {self.diff.get('action', '')} - {self.changed_at}"
