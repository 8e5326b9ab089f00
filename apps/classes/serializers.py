"""Serializers for templates and sessions."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import ClassTemplate, Session


class ClassTemplateSerializer(serializers.ModelSerializer):
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)

    class Meta:
        model = ClassTemplate
        fields = [
            "id",
            "title",
            "description",
            "class_type",
            "day_of_week",
            "start_time",
            "duration_minutes",
            "capacity",
            "price",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "capacity": {"required": False},
            "price": {"required": False},
        }


class SessionSerializer(serializers.ModelSerializer):
    template_id = serializers.IntegerField(read_only=True, allow_null=True)
    available_seats = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    starts_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = Session
        fields = [
            "id",
            "template_id",
            "title",
            "description",
            "class_type",
            "date",
            "start_time",
            "starts_at",
            "duration_minutes",
            "capacity",
            "booked_count",
            "available_seats",
            "is_full",
            "price",
            "is_active",
        ]
        read_only_fields = ["id", "template_id", "booked_count"]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "capacity": {"required": False},
            "price": {"required": False},
        }
