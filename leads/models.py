from django.conf import settings
from django.db import models

from booking.models import Booking
from booking.references import unique_reference


class Lead(models.Model):
    """An enquiry that has not turned into a booking yet."""

    class Status(models.TextChoices):
        NEW = "new", "New"
        CONTACTED = "contacted", "Contacted"
        QUALIFIED = "qualified", "Qualified"
        PROPOSAL_SENT = "proposal_sent", "Proposal sent"
        NEGOTIATION = "negotiation", "Negotiation"
        CONVERTED = "converted", "Converted"
        LOST = "lost", "Lost"

    class Source(models.TextChoices):
        WEBSITE = "website", "Website"
        REFERRAL = "referral", "Referral"
        SOCIAL_MEDIA = "social_media", "Social media"
        WALK_IN = "walk_in", "Walk in"
        PHONE = "phone", "Phone"
        EMAIL = "email", "Email"
        PARTNER = "partner", "Partner"
        OTHER = "other", "Other"

    # Statuses an agent can set by editing the lead; "converted" is reached only by conversion.
    EDITABLE_STATUSES = frozenset({
        Status.NEW, Status.CONTACTED, Status.QUALIFIED, Status.PROPOSAL_SENT, Status.NEGOTIATION, Status.LOST,
    })
    CLOSED_STATUSES = frozenset({Status.CONVERTED, Status.LOST})

    reference = models.CharField(max_length=40, unique=True, editable=False)
    agent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="leads")

    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    email = models.EmailField()
    phone = models.CharField(max_length=30)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)

    destination = models.CharField(max_length=120, blank=True)
    trip_type = models.CharField(max_length=16, choices=Booking.TripType.choices, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    infants = models.PositiveSmallIntegerField(default=0)
    budget_min = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    budget_max = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    special_requirements = models.TextField(blank=True)

    source = models.CharField(max_length=16, choices=Source.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.NEW, db_index=True)
    priority = models.CharField(max_length=8, choices=Booking.Priority.choices, default=Booking.Priority.MEDIUM)

    converted_to_booking = models.OneToOneField(
        Booking, on_delete=models.SET_NULL, null=True, blank=True, related_name="lead"
    )
    converted_to_customer = models.ForeignKey(
        "customers.Customer", on_delete=models.SET_NULL, null=True, blank=True, related_name="leads"
    )
    converted_at = models.DateTimeField(null=True, blank=True)
    lost_reason = models.TextField(blank=True)
    lost_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["agent", "status"])]

    def __str__(self):
        return f"{self.reference} {self.first_name} {self.last_name} [{self.status}]"

    @property
    def is_closed(self) -> bool:
        return self.status in self.CLOSED_STATUSES

    def save(self, *args, **kwargs):
        if not self.reference:
            self.reference = unique_reference(Lead, "reference", "LD")
        super().save(*args, **kwargs)
