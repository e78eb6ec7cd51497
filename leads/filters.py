import django_filters
from django.db.models import Q

from booking.filters import CharInFilter

from .models import Lead


class LeadFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    source = CharInFilter(field_name="source", lookup_expr="in")
    priority = CharInFilter(field_name="priority", lookup_expr="in")
    agent = django_filters.NumberFilter(field_name="agent_id")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Lead
        fields = ("status", "source", "priority", "agent")

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(reference__icontains=value)
            | Q(first_name__icontains=value)
            | Q(last_name__icontains=value)
            | Q(email__icontains=value)
            | Q(destination__icontains=value)
        )
