from django.contrib import admin

from .models import Booking, BookingStatusChange


class BookingStatusChangeInline(admin.TabularInline):
    model = BookingStatusChange
    extra = 0
    can_delete = False
    fields = ("status", "changed_at", "changed_by", "reason", "notes")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "reference", "agent", "customer", "destination", "start_date", "end_date",
        "status", "payment_status", "total_amount", "amount_due", "created_at",
    )
    list_filter = ("status", "payment_status", "booking_type", "priority", "created_at")
    search_fields = ("reference", "title", "destination", "customer__email", "agent__username")
    inlines = (BookingStatusChangeInline,)
    readonly_fields = (
        "reference", "number_of_nights", "total_amount", "payment_status", "amount_paid",
        "amount_refunded", "amount_due", "cancelled_at", "cancelled_by", "created_at", "updated_at",
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("agent", "customer")
