from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "first_name", "last_name", "email", "agent", "total_trips", "total_spent", "loyalty_points", "is_active")
    list_filter = ("is_active", "country")
    search_fields = ("first_name", "last_name", "email", "phone")
    readonly_fields = ("total_trips", "total_spent", "loyalty_points", "created_at", "updated_at")
