"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.classes.serializers import SessionSerializer

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Input for booking a seat."""

    session_id = serializers.IntegerField(min_value=1)
    payment_method = serializers.ChoiceField(choices=Booking.PaymentMethod.choices)
    payment_token = serializers.CharField(required=False, allow_blank=True, max_length=255)


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Booking with the session it holds a seat in."""

    member_id = serializers.IntegerField(read_only=True, allow_null=True)
    session = SessionSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "member_id",
            "session",
            "status",
            "payment_method",
            "is_free_session",
            "price",
            "confirmed_at",
            "cancelled_at",
            "cancellation_source",
            "cancellation_reason",
            "created_at",
        ]
        read_only_fields = fields
