from rest_framework import filters, permissions, viewsets

from permissions import IsOwnerOrElevated, has_capability

from .serializers import CustomerSerializer
from .services import customers_for


class CustomerOwnerOrElevated(IsOwnerOrElevated):
    capability = "can_view_all_customers"


class CustomerViewSet(viewsets.ModelViewSet):
    serializer_class = CustomerSerializer
    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated, CustomerOwnerOrElevated]
    filter_backends = (filters.SearchFilter, filters.OrderingFilter)
    search_fields = ("first_name", "last_name", "email", "phone")
    ordering_fields = ("created_at", "total_spent", "total_trips")

    def get_queryset(self):
        user = self.request.user
        return customers_for(user, has_capability(user, "can_view_all_customers"))

    def perform_create(self, serializer):
        serializer.save(agent=self.request.user)

    def perform_destroy(self, instance):
        # Soft delete: bookings and payments keep pointing at the row.
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
