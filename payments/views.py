from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from permissions import CanProcessRefunds, has_capability

from . import services
from .filters import PaymentFilter
from .serializers import PaymentCreateSerializer, PaymentSerializer, RefundSerializer


class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Payments are never edited or deleted through the API; refunds add a new row."""

    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = PaymentFilter
    ordering_fields = ("created_at", "amount")
    ordering = ("-created_at",)

    def can_view_all(self):
        return has_capability(self.request.user, "can_view_all_payments")

    def get_queryset(self):
        return services.payments_for(self.request.user, self.can_view_all())

    def get_serializer_class(self):
        if self.action == "create":
            return PaymentCreateSerializer
        if self.action == "refund":
            return RefundSerializer
        return PaymentSerializer

    def retrieve(self, request, *args, **kwargs):
        payment = services.get_payment(kwargs["pk"], request.user, self.can_view_all())
        return Response(PaymentSerializer(payment, context={"request": request}).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = services.process_payment(
            data["booking"],
            data["amount"],
            data["method"],
            request.user,
            has_capability(request.user, "can_view_all_bookings"),
            source=data.get("source") or None,
            notes=data["notes"],
        )
        body = PaymentSerializer(payment, context={"request": request}).data
        if payment.status == payment.Status.FAILED:
            return Response(
                {"detail": "Payment failed. Please try again.", "code": "payment_failed", "payment": body},
                status=status.HTTP_402_PAYMENT_REQUIRED,
            )
        return Response(body, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, CanProcessRefunds])
    def refund(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        refund = services.process_refund(
            pk,
            amount=serializer.validated_data.get("amount"),
            reason=serializer.validated_data["reason"],
            actor=request.user,
            can_view_all=self.can_view_all(),
        )
        return Response(PaymentSerializer(refund, context={"request": request}).data, status=status.HTTP_201_CREATED)
