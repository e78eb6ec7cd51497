from django.conf import settings
from django.db import models

from booking.references import unique_reference


class Payment(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        REFUNDED = "refunded", "Refunded"

    class Type(models.TextChoices):
        FULL = "full", "Full"
        PARTIAL = "partial", "Partial"
        ADVANCE = "advance", "Advance"
        BALANCE = "balance", "Balance"
        REFUND = "refund", "Refund"

    class Method(models.TextChoices):
        CREDIT_CARD = "credit_card", "Credit card"
        DEBIT_CARD = "debit_card", "Debit card"
        BANK_TRANSFER = "bank_transfer", "Bank transfer"
        UPI = "upi", "UPI"
        WALLET = "wallet", "Wallet"
        CASH = "cash", "Cash"
        CHEQUE = "cheque", "Cheque"

    TRANSITIONS = {
        Status.PENDING: frozenset({Status.PROCESSING}),
        Status.PROCESSING: frozenset({Status.COMPLETED, Status.FAILED}),
        Status.COMPLETED: frozenset({Status.REFUNDED}),
        Status.FAILED: frozenset(),
        Status.REFUNDED: frozenset(),
    }
    # Statuses whose amount is part of the booking's amount_paid ledger.
    SETTLED_STATUSES = frozenset({Status.COMPLETED, Status.REFUNDED})

    transaction_id = models.CharField(max_length=40, unique=True, editable=False)
    booking = models.ForeignKey("booking.Booking", on_delete=models.PROTECT, related_name="payments")
    agent = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="payments")
    customer = models.ForeignKey("customers.Customer", on_delete=models.PROTECT, related_name="payments")

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    method = models.CharField(max_length=16, choices=Method.choices)
    payment_type = models.CharField(max_length=16, choices=Type.choices, default=Type.FULL)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    gateway = models.CharField(max_length=50, default="fake")
    gateway_response = models.JSONField(default=dict, blank=True)

    receipt_number = models.CharField(max_length=40, blank=True, null=True)
    receipt_generated_at = models.DateTimeField(null=True, blank=True)

    refund_of = models.ForeignKey(
        "self", on_delete=models.PROTECT, null=True, blank=True, related_name="refunds"
    )
    original_transaction_id = models.CharField(max_length=40, blank=True, null=True)
    refund_reason = models.TextField(blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "status", "created_at"]),
            models.Index(fields=["booking", "amount", "status", "created_at"], name="payment_dedup_check"),
        ]

    def __str__(self):
        return f"{self.transaction_id} → {self.booking_id} [{self.status}]"

    @property
    def is_terminal(self) -> bool:
        return not self.TRANSITIONS.get(self.status)

    @property
    def is_refund(self) -> bool:
        return self.payment_type == self.Type.REFUND

    def can_transition_to(self, new_status) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, frozenset())

    def save(self, *args, **kwargs):
        if not self.transaction_id:
            self.transaction_id = unique_reference(Payment, "transaction_id", "TXN")
        super().save(*args, **kwargs)
