"""URL routing for the studio catalog."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ServiceSlotsView, StudioViewSet

router = DefaultRouter()
router.register(r"", StudioViewSet, basename="studio")

urlpatterns = [
    path(
        "<int:studio_pk>/services/<int:service_pk>/slots/",
        ServiceSlotsView.as_view(),
        name="service-slots",
    ),
    path("", include(router.urls)),
]
