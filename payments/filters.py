import django_filters

from booking.filters import CharInFilter

from .models import Payment


class PaymentFilter(django_filters.FilterSet):
    status = CharInFilter(field_name="status", lookup_expr="in")
    min_amount = django_filters.NumberFilter(field_name="amount", lookup_expr="gte")
    max_amount = django_filters.NumberFilter(field_name="amount", lookup_expr="lte")
    date_from = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    date_to = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Payment
        fields = {
            "method": ["exact"],
            "payment_type": ["exact"],
            "booking": ["exact"],
            "customer": ["exact"],
        }
