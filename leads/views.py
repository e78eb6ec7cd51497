from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from booking.serializers import BookingDetailSerializer
from permissions import has_capability

from . import services
from .filters import LeadFilter
from .serializers import LeadConversionSerializer, LeadSerializer, LeadWriteSerializer


class LeadViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = LeadFilter
    ordering_fields = ("created_at", "priority", "start_date")
    ordering = ("-created_at",)
    http_method_names = ["get", "post", "patch", "head", "options"]

    def can_view_all(self):
        return has_capability(self.request.user, "can_view_all_leads")

    def get_queryset(self):
        return services.leads_for(self.request.user, self.can_view_all())

    def get_serializer_class(self):
        if self.action in ("create", "partial_update"):
            return LeadWriteSerializer
        if self.action == "convert":
            return LeadConversionSerializer
        return LeadSerializer

    def retrieve(self, request, *args, **kwargs):
        lead = services.get_lead(kwargs["pk"], request.user, self.can_view_all())
        return Response(LeadSerializer(lead, context={"request": request}).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lead = services.create_lead(serializer.validated_data, request.user)
        return Response(LeadSerializer(lead, context={"request": request}).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        lead = services.get_lead(kwargs["pk"], request.user, self.can_view_all())
        serializer = self.get_serializer(lead, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        lead = services.update_lead(lead.pk, serializer.validated_data, request.user, self.can_view_all())
        return Response(LeadSerializer(lead, context={"request": request}).data)

    @action(detail=True, methods=["post"])
    def convert(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lead = services.convert_lead_to_booking(pk, serializer.validated_data, request.user, self.can_view_all())
        return Response(
            {
                "lead": LeadSerializer(lead, context={"request": request}).data,
                "booking": BookingDetailSerializer(lead.converted_to_booking, context={"request": request}).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.lead_stats(request.user, self.can_view_all()))
