"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.classes.exceptions import ScheduleError
from apps.members.permissions import IsAdmin

from . import services
from .exceptions import BookingError
from .models import Booking
from .serializers import BookingCancelSerializer, BookingCreateSerializer, BookingSerializer


def booking_error_response(exc: BookingError | ScheduleError) -> Response:
    return Response({"code": exc.code, "detail": exc.message}, status=exc.status_code)


def client_origin(request) -> str:  # type: ignore
    """First address in X-Forwarded-For, else the socket peer address."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "") or "unknown"


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Members book and cancel seats; staff see everything and confirm cash."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    queryset = Booking.objects.none()
    filterset_fields = ["status", "payment_method", "is_free_session"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        if getattr(user, "is_admin", False):
            return services.list_all_bookings()
        return services.list_member_bookings(user.pk)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            booking = services.create_booking(
                request.user.pk,
                data["session_id"],
                data["payment_method"],
                payment_token=data.get("payment_token") or None,
                origin=client_origin(request),
            )
        except (BookingError, ScheduleError) as exc:
            return booking_error_response(exc)
        booking.refresh_from_db()
        return Response(self.get_serializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = services.cancel_booking(
                int(pk), request.user.pk, reason=serializer.validated_data["reason"]
            )
        except BookingError as exc:
            return booking_error_response(exc)
        return Response(
            {
                "booking": self.get_serializer(result.booking).data,
                "free_session_restored": result.free_session_restored,
                "free_session_forfeited": result.free_session_forfeited,
            }
        )

    @action(detail=True, methods=["post"], url_path="confirm-cash", permission_classes=[IsAdmin])
    def confirm_cash(self, request, pk=None):  # type: ignore
        try:
            booking = services.confirm_cash_booking(int(pk))
        except BookingError as exc:
            return booking_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=False, methods=["get"], permission_classes=[IsAdmin])
    def stats(self, request):  # type: ignore
        return Response(services.booking_stats())
