from __future__ import annotations

import logging

import django_filters as df
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import generics, permissions
from rest_framework.filters import OrderingFilter

from domains.tracking.exceptions import TrackingProviderError
from domains.tracking.services import register_part_tracking
from shared.pagination import StandardResultsSetPagination
from shared.permissions import IsOwnerOrStaff

from .models import Part
from .serializers import PartSerializer

logger = logging.getLogger(__name__)


def _register_tracking(part: Part) -> None:
    # 등록 실패는 부품 저장을 막지 않는다 (웹훅/폴링으로 나중에 따라잡음)
    try:
        register_part_tracking(part)
    except TrackingProviderError as e:
        logger.warning("Tracking registration failed for part %s: %s", part.pk, e)


# -------------------------------
# Filters
# -------------------------------
class PartFilter(df.FilterSet):
    shipped = df.BooleanFilter()
    delivered = df.BooleanFilter()
    tracking_status = df.CharFilter()
    has_tracking = df.BooleanFilter(method="filter_has_tracking")

    class Meta:
        model = Part
        fields = ["shipped", "delivered", "tracking_status"]

    def filter_has_tracking(self, queryset, name, value):
        if value:
            return queryset.exclude(tracking="")
        return queryset.filter(tracking="")


# -------------------------------
# GET (list) / POST (create)
# -------------------------------
class PartListCreateAPI(generics.ListCreateAPIView):
    """
    GET  /api/v1/parts/   (본인 부품, staff 는 전체)
    POST /api/v1/parts/
    """
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = PartSerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PartFilter
    ordering_fields = ["created_at", "tracking_updated_at"]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        return Part.objects.visible_to(self.request.user)

    @extend_schema(operation_id="ListParts")
    def get(self, *args, **kwargs):
        return super().get(*args, **kwargs)

    @extend_schema(operation_id="CreatePart", request=PartSerializer, responses={201: PartSerializer})
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform_create(self, serializer):
        part = serializer.save(user=self.request.user)
        _register_tracking(part)


# -------------------------------
# GET / PATCH / DELETE
# -------------------------------
class PartDetailAPI(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrStaff]
    serializer_class = PartSerializer

    def get_queryset(self):
        return Part.objects.visible_to(self.request.user)

    def perform_update(self, serializer):
        previous = serializer.instance.tracking
        part = serializer.save()
        if part.tracking != previous:
            _register_tracking(part)
