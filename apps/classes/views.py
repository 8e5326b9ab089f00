"""API views for the schedule."""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.members.permissions import IsAdmin, IsAdminOrReadOnly

from . import services
from .exceptions import ScheduleError
from .models import ClassTemplate, Session
from .serializers import ClassTemplateSerializer, SessionSerializer


def schedule_error_response(exc: ScheduleError) -> Response:
    return Response({"code": exc.code, "detail": exc.message}, status=exc.status_code)


class SessionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Upcoming sessions for members; ad-hoc session management for staff."""

    serializer_class = SessionSerializer
    permission_classes = [IsAdminOrReadOnly]
    queryset = Session.objects.all()

    def get_queryset(self):  # type: ignore
        if self.action == "list":
            return services.list_upcoming_sessions()
        return super().get_queryset()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            session = services.create_session(**serializer.validated_data)
        except ScheduleError as exc:
            return schedule_error_response(exc)
        return Response(self.get_serializer(session).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            session = services.update_session(int(pk), **serializer.validated_data)
        except ScheduleError as exc:
            return schedule_error_response(exc)
        return Response(self.get_serializer(session).data)


class ClassTemplateViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Administrator management of recurring weekly classes."""

    serializer_class = ClassTemplateSerializer
    permission_classes = [IsAdmin]
    queryset = ClassTemplate.objects.all()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            template = services.create_template(**serializer.validated_data)
        except ScheduleError as exc:
            return schedule_error_response(exc)
        return Response(self.get_serializer(template).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            template = services.update_template(int(pk), **serializer.validated_data)
        except ScheduleError as exc:
            return schedule_error_response(exc)
        return Response(self.get_serializer(template).data)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_template(instance.pk)

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):  # type: ignore
        self.get_object()
        is_active = request.data.get("is_active")
        if is_active is not None and not isinstance(is_active, bool):
            return Response(
                {"code": "invalid_template", "detail": "is_active must be a boolean."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        template = services.toggle_template(int(pk), is_active)
        return Response(self.get_serializer(template).data)
