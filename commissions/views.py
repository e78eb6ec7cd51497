import django_filters
from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from permissions import CanApproveCommissions, has_capability

from . import services
from .models import Commission
from .serializers import CommissionPaymentSerializer, CommissionReasonSerializer, CommissionSerializer


class CommissionFilter(django_filters.FilterSet):
    class Meta:
        model = Commission
        fields = ["status", "tier", "month", "year", "agent"]


class CommissionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Agents see their own commissions; approvers see and move all of them."""

    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = CommissionSerializer
    filterset_class = CommissionFilter
    ordering_fields = ("created_at", "total_earning")
    ordering = ("-created_at",)

    def can_view_all(self):
        return has_capability(self.request.user, "can_approve_commissions")

    def get_queryset(self):
        return services.commissions_for(self.request.user, self.can_view_all())

    def get_serializer_class(self):
        if self.action == "pay":
            return CommissionPaymentSerializer
        if self.action in ("reject", "hold"):
            return CommissionReasonSerializer
        return CommissionSerializer

    def _respond(self, commission):
        return Response(CommissionSerializer(commission, context={"request": self.request}).data)

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, CanApproveCommissions])
    def approve(self, request, pk=None):
        return self._respond(services.approve_commission(pk, request.user))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, CanApproveCommissions])
    def pay(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._respond(services.mark_commission_paid(pk, serializer.validated_data, request.user))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, CanApproveCommissions])
    def reject(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._respond(services.reject_commission(pk, request.user, serializer.validated_data["reason"]))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, CanApproveCommissions])
    def hold(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._respond(services.hold_commission(pk, request.user, serializer.validated_data["reason"]))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, CanApproveCommissions])
    def release(self, request, pk=None):
        return self._respond(services.release_commission(pk, request.user))

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(services.commission_summary(request.user, self.can_view_all()))
