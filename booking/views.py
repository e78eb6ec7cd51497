from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from permissions import has_capability

from . import services
from .conflicts import list_booking_conflicts
from .filters import BookingFilter
from .serializers import (
    BookingDetailSerializer,
    BookingReadSerializer,
    BookingStatusSerializer,
    BookingWriteSerializer,
    ConflictQuerySerializer,
)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Thin controller over ``booking.services``. Engine failures propagate as
    ``BookingError`` and are rendered by the project exception handler.
    """

    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilter
    ordering_fields = ("created_at", "start_date", "total_amount", "priority")
    ordering = ("-created_at",)
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def can_view_all(self):
        return has_capability(self.request.user, "can_view_all_bookings")

    def get_queryset(self):
        return services.bookings_for(self.request.user, self.can_view_all())

    def get_serializer_class(self):
        if self.action in ("create", "partial_update"):
            return BookingWriteSerializer
        if self.action == "retrieve":
            return BookingDetailSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        return BookingReadSerializer

    def retrieve(self, request, *args, **kwargs):
        booking = services.get_booking(kwargs["pk"], request.user, self.can_view_all())
        return Response(BookingDetailSerializer(booking, context={"request": request}).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.create_booking(serializer.validated_data, request.user)
        return Response(
            BookingDetailSerializer(booking, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, *args, **kwargs):
        can_update_any = has_capability(request.user, "can_update_any_booking")
        booking = services.get_booking(kwargs["pk"], request.user, can_update_any)
        serializer = self.get_serializer(booking, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        booking = services.update_booking(booking.pk, serializer.validated_data, request.user, can_update_any)
        return Response(BookingDetailSerializer(booking, context={"request": request}).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_booking(
            kwargs["pk"], request.user, has_capability(request.user, "can_delete_any_booking")
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.update_booking_status(
            pk,
            serializer.validated_data["status"],
            request.user,
            self.can_view_all(),
            reason=serializer.validated_data["reason"],
        )
        return Response(BookingDetailSerializer(booking, context={"request": request}).data)

    @action(detail=False, methods=["get"])
    def conflicts(self, request):
        query = ConflictQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        qs = list_booking_conflicts(
            data["customer"], data["destination"], data["start_date"], data["end_date"],
            exclude_booking_id=data.get("exclude_booking"),
        )
        if not self.can_view_all():
            qs = qs.filter(agent=request.user)
        return Response(BookingReadSerializer(qs, many=True, context={"request": request}).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.booking_stats(request.user, self.can_view_all(), request.query_params.get("agent")))
