import json

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Read-only ledger view. Payments change only through the payment services."""

    list_display = (
        'transaction_id',
        'booking_link',
        'payment_type',
        'amount_currency',
        'status',
        'receipt_number',
        'created_at',
        'is_terminal',
    )
    list_filter = ('status', 'payment_type', 'method', 'gateway', 'created_at')
    search_fields = (
        'transaction_id',
        'receipt_number',
        'original_transaction_id',
        'booking__reference',
        'customer__email',
        'agent__username',
    )
    fieldsets = (
        ('Basic Information', {
            'fields': (
                'transaction_id',
                'booking_link',
                'payment_type',
                'method',
                'status',
                'amount',
                'currency',
            )
        }),
        ('Receipt', {
            'fields': ('receipt_number', 'receipt_generated_at')
        }),
        ('Refund', {
            'fields': ('refund_of', 'original_transaction_id', 'refund_reason', 'refunded_at'),
            'classes': ('collapse',)
        }),
        ('Gateway', {
            'fields': ('gateway', 'gateway_response_preview'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def booking_link(self, obj):
        url = reverse("admin:booking_booking_change", args=[obj.booking_id])
        return format_html('<a href="{}">{}</a>', url, obj.booking.reference)
    booking_link.short_description = "Booking"

    def amount_currency(self, obj):
        return f"{obj.amount} {obj.currency}"
    amount_currency.short_description = "Amount"
    amount_currency.admin_order_field = 'amount'

    def gateway_response_preview(self, obj):
        if obj.gateway_response:
            formatted_json = json.dumps(obj.gateway_response, indent=2, ensure_ascii=False, default=str)
            return format_html('<pre style="max-height: 300px; overflow: auto;">{}</pre>', formatted_json)
        return "No gateway response"
    gateway_response_preview.short_description = "Gateway response"

    def is_terminal(self, obj):
        return obj.is_terminal
    is_terminal.boolean = True
    is_terminal.short_description = "Terminal Status"

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields] + [
            'booking_link', 'gateway_response_preview', 'is_terminal',
        ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('booking', 'agent', 'customer')
