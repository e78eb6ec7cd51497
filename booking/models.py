from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .references import unique_reference

User = settings.AUTH_USER_MODEL

ZERO = Decimal("0.00")


def default_currency() -> str:
    return settings.DEFAULT_CURRENCY


def compute_total(base_price, taxes, service_charge, discount) -> Decimal:
    return (base_price or ZERO) + (taxes or ZERO) + (service_charge or ZERO) - (discount or ZERO)


class Booking(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"
        REFUNDED = "refunded", "Refunded"

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", "Unpaid"
        PARTIALLY_PAID = "partially_paid", "Partially paid"
        PAID = "paid", "Paid"
        REFUNDED = "refunded", "Refunded"

    class BookingType(models.TextChoices):
        FLIGHT = "flight", "Flight"
        HOTEL = "hotel", "Hotel"
        PACKAGE = "package", "Package"
        TRANSFER = "transfer", "Transfer"
        ACTIVITY = "activity", "Activity"
        VISA = "visa", "Visa"
        INSURANCE = "insurance", "Insurance"
        CUSTOM = "custom", "Custom"

    class TripType(models.TextChoices):
        DOMESTIC = "domestic", "Domestic"
        INTERNATIONAL = "international", "International"
        HONEYMOON = "honeymoon", "Honeymoon"
        FAMILY = "family", "Family"
        ADVENTURE = "adventure", "Adventure"
        BUSINESS = "business", "Business"
        GROUP = "group", "Group"
        SOLO = "solo", "Solo"
        PILGRIMAGE = "pilgrimage", "Pilgrimage"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    TRANSITIONS = {
        Status.DRAFT: frozenset({Status.PENDING, Status.CANCELLED}),
        Status.PENDING: frozenset({Status.CONFIRMED, Status.CANCELLED}),
        Status.CONFIRMED: frozenset({Status.IN_PROGRESS, Status.CANCELLED}),
        Status.IN_PROGRESS: frozenset({Status.COMPLETED, Status.CANCELLED}),
        Status.COMPLETED: frozenset({Status.REFUNDED}),
        Status.CANCELLED: frozenset({Status.PENDING}),
        Status.REFUNDED: frozenset(),
    }
    INITIAL_STATUSES = frozenset({Status.DRAFT, Status.PENDING})
    EDITABLE_STATUSES = frozenset({Status.DRAFT, Status.PENDING})
    DELETABLE_STATUSES = frozenset({Status.DRAFT, Status.CANCELLED})
    INACTIVE_STATUSES = frozenset({Status.CANCELLED, Status.REFUNDED})
    UNPAYABLE_STATUSES = frozenset({Status.CANCELLED, Status.REFUNDED})

    reference = models.CharField(max_length=40, unique=True, editable=False)
    agent = models.ForeignKey(User, on_delete=models.PROTECT, related_name="bookings")
    customer = models.ForeignKey("customers.Customer", on_delete=models.PROTECT, related_name="bookings")

    booking_type = models.CharField(max_length=16, choices=BookingType.choices, default=BookingType.PACKAGE)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    trip_type = models.CharField(max_length=16, choices=TripType.choices, blank=True)
    origin = models.CharField(max_length=120, blank=True)
    destination = models.CharField(max_length=120)
    start_date = models.DateField()
    end_date = models.DateField()
    number_of_nights = models.PositiveIntegerField(default=0, editable=False)

    adults = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    children = models.PositiveSmallIntegerField(default=0)
    infants = models.PositiveSmallIntegerField(default=0)

    base_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(ZERO)])
    taxes = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    service_charge = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    discount_reason = models.CharField(max_length=255, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, editable=False)
    currency = models.CharField(max_length=3, default=default_currency)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)
    payment_status = models.CharField(
        max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID, editable=False
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, editable=False)
    amount_refunded = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, editable=False)
    amount_due = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, editable=False)

    priority = models.CharField(max_length=8, choices=Priority.choices, default=Priority.MEDIUM)
    tags = models.JSONField(default=list, blank=True)
    special_requests = models.TextField(blank=True)
    internal_notes = models.TextField(blank=True)

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="cancelled_bookings"
    )
    cancellation_reason = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["agent", "status", "created_at"]),
            models.Index(
                fields=["customer", "destination", "start_date", "end_date"],
                name="booking_conflict_check",
            ),
        ]

    def __str__(self):
        return f"{self.reference} ({self.destination}, {self.status})"

    @classmethod
    def derive_payment_status(cls, total: Decimal, paid: Decimal, refunded: Decimal) -> str:
        if refunded > ZERO and paid <= ZERO:
            return cls.PaymentStatus.REFUNDED
        if paid <= ZERO:
            return cls.PaymentStatus.UNPAID
        if paid >= total:
            return cls.PaymentStatus.PAID
        return cls.PaymentStatus.PARTIALLY_PAID

    def can_transition_to(self, new_status) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, frozenset())

    def recalc_totals(self):
        """
        Recompute every derived field from the stored facts.
        Runs on every save so no caller can persist an inconsistent total.
        """
        self.total_amount = compute_total(self.base_price, self.taxes, self.service_charge, self.discount)
        self.amount_due = self.total_amount - (self.amount_paid or ZERO)
        self.payment_status = self.derive_payment_status(
            self.total_amount, self.amount_paid or ZERO, self.amount_refunded or ZERO
        )
        if self.start_date and self.end_date:
            self.number_of_nights = abs((self.end_date - self.start_date).days)

    def save(self, *args, **kwargs):
        if not self.reference:
            self.reference = unique_reference(Booking, "reference", "BK")
        self.recalc_totals()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {
                "total_amount", "amount_due", "payment_status", "number_of_nights", "updated_at",
            }
        super().save(*args, **kwargs)


class BookingStatusChange(models.Model):
    """Append-only status log of a booking."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=16, choices=Booking.Status.choices)
    changed_at = models.DateTimeField(auto_now_add=True)
    changed_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["changed_at", "id"]

    def __str__(self):
        return f"{self.booking_id} → {self.status}"
