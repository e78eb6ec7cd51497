from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from cloudinary.models import CloudinaryField


class User(AbstractUser):
    """An agency staff member. Every booking, payment and commission belongs to one."""

    class Role(models.TextChoices):
        SUPER_ADMIN = "super_admin", "Super admin"
        ADMIN = "admin", "Admin"
        SENIOR_AGENT = "senior_agent", "Senior agent"
        AGENT = "agent", "Agent"
        JUNIOR_AGENT = "junior_agent", "Junior agent"

    role = models.CharField(max_length=16, choices=Role.choices, default=Role.AGENT)
    phone = models.CharField(max_length=30, blank=True, null=True)
    agency_name = models.CharField(max_length=100, blank=True, null=True)
    agency_license = models.CharField(max_length=100, blank=True, null=True)

    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("50"))],
        help_text="Personal commission rate (%). Leave empty to use the booking tier rate.",
    )
    total_earnings = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_bookings = models.PositiveIntegerField(default=0)

    avatar = CloudinaryField(
        "avatar",
        blank=True,
        null=True,
    )

    def is_admin(self):
        return self.role in (self.Role.SUPER_ADMIN, self.Role.ADMIN)

    def is_agent(self):
        return self.role in (self.Role.SENIOR_AGENT, self.Role.AGENT, self.Role.JUNIOR_AGENT)

    def __str__(self):
        return f"{self.username} ({self.role})"
