from django.contrib import admin

from .models import Commission


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = (
        "reference", "agent", "booking", "tier", "commission_rate", "booking_amount",
        "total_earning", "status", "month", "year",
    )
    list_filter = ("status", "tier", "year", "month")
    search_fields = ("reference", "booking__reference", "agent__username", "agent__email")
    readonly_fields = (
        "reference", "agent", "booking", "booking_amount", "commission_rate", "commission_amount",
        "tier", "bonus_amount", "total_earning", "status", "approved_by", "approved_at",
        "paid_at", "paid_by", "created_at", "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("agent", "booking")
