import django_filters
from django.db.models import Q

from .models import Booking


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    """Comma separated values, e.g. ``?status=pending,confirmed``."""


class BookingFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    priority = CharInFilter(field_name="priority", lookup_expr="in")
    trip_type = CharInFilter(field_name="trip_type", lookup_expr="in")
    destination = django_filters.CharFilter(field_name="destination", lookup_expr="icontains")
    start_date_from = django_filters.DateFilter(field_name="start_date", lookup_expr="gte")
    start_date_to = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")
    min_amount = django_filters.NumberFilter(field_name="total_amount", lookup_expr="gte")
    max_amount = django_filters.NumberFilter(field_name="total_amount", lookup_expr="lte")
    agent = django_filters.NumberFilter(field_name="agent_id")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Booking
        fields = {
            "booking_type": ["exact"],
            "payment_status": ["exact"],
            "customer": ["exact"],
        }

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(reference__icontains=value) | Q(title__icontains=value) | Q(destination__icontains=value)
        )
