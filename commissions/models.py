from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from booking.models import ZERO
from booking.references import unique_reference


def _current_month():
    return timezone.now().month


def _current_year():
    return timezone.now().year


class Commission(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        PAID = "paid", "Paid"
        REJECTED = "rejected", "Rejected"
        ON_HOLD = "on_hold", "On hold"

    class Tier(models.TextChoices):
        JUNIOR = "junior", "Junior"
        STANDARD = "standard", "Standard"
        SENIOR = "senior", "Senior"
        PREMIUM = "premium", "Premium"

    TRANSITIONS = {
        Status.PENDING: frozenset({Status.APPROVED, Status.REJECTED, Status.ON_HOLD}),
        Status.APPROVED: frozenset({Status.PAID, Status.REJECTED, Status.ON_HOLD}),
        Status.ON_HOLD: frozenset({Status.PENDING}),
        Status.PAID: frozenset(),
        Status.REJECTED: frozenset(),
    }

    reference = models.CharField(max_length=40, unique=True, editable=False)
    agent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="commissions")
    booking = models.OneToOneField("booking.Booking", on_delete=models.PROTECT, related_name="commission")

    booking_amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission_rate = models.DecimalField(
        max_digits=5, decimal_places=2, validators=[MinValueValidator(ZERO), MaxValueValidator(50)]
    )
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    tier = models.CharField(max_length=16, choices=Tier.choices, default=Tier.STANDARD)
    bonus_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    total_earning = models.DecimalField(max_digits=12, decimal_places=2, editable=False)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    payment_method = models.CharField(max_length=50, blank=True)
    transaction_reference = models.CharField(max_length=100, blank=True)
    rejection_reason = models.TextField(blank=True)

    month = models.PositiveSmallIntegerField(default=_current_month)
    year = models.PositiveSmallIntegerField(default=_current_year)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["agent", "status"]),
            models.Index(fields=["year", "month"]),
        ]

    def __str__(self):
        return f"{self.reference} {self.total_earning} [{self.status}]"

    def can_transition_to(self, new_status) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, frozenset())

    def save(self, *args, **kwargs):
        if not self.reference:
            self.reference = unique_reference(Commission, "reference", "COM")
        self.total_earning = (self.commission_amount or ZERO) + (self.bonus_amount or ZERO)
        super().save(*args, **kwargs)
