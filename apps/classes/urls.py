"""URL routing for the schedule."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ClassTemplateViewSet, SessionViewSet

router = DefaultRouter()
router.register(r"sessions", SessionViewSet, basename="session")
router.register(r"templates", ClassTemplateViewSet, basename="template")

urlpatterns = [
    path("", include(router.urls)),
]
