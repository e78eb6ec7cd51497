from django.contrib import admin

from .models import Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ("reference", "agent", "first_name", "last_name", "destination", "source", "status", "created_at")
    list_filter = ("status", "source", "priority", "created_at")
    search_fields = ("reference", "first_name", "last_name", "email", "destination")
    readonly_fields = ("reference", "converted_to_booking", "converted_to_customer", "converted_at", "lost_at",
                       "created_at", "updated_at")
