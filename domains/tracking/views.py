# domains/tracking/views.py
import logging

from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import parsers, permissions, status
from rest_framework.exceptions import ParseError, UnsupportedMediaType
from rest_framework.response import Response
from rest_framework.views import APIView

from domains.parts.models import Part
from shared.api_markers import EmptySerializer

from .exceptions import InvalidPayloadError, TrackingProviderError, TrackingRateLimited, WebhookAuthError
from .serializers import TrackingSnapshotSerializer, WebhookInSerializer, WebhookResultSerializer
from .services import TrackingUpdateIngestor, WebhookAuth, refresh_active_trackings, sync_part_tracking

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------
# POST|HEAD|GET /api/v1/tracking/webhook/
#  - Ship24 → 우리 서버. JWT 인증 대신 공유 시크릿(Authorization 헤더)
#  - 응답 모양은 고정, 내부 에러 내용은 절대 내보내지 않음
# --------------------------------------------------------------------
class TrackingWebhookAPI(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    parser_classes = [parsers.JSONParser]

    def get_ingestor(self) -> TrackingUpdateIngestor:
        return TrackingUpdateIngestor(WebhookAuth.from_settings())

    @extend_schema(request=WebhookInSerializer, responses={200: WebhookResultSerializer})
    def post(self, request):
        try:
            payload = request.data
        except (ParseError, UnsupportedMediaType):
            # 인증 검사가 먼저 돌도록 여기선 payload 만 비워 둔다
            payload = None

        try:
            result = self.get_ingestor().ingest(payload, request.headers.get("Authorization"))
        except WebhookAuthError:
            logger.error("Invalid webhook authorization")
            return Response({"error": "Invalid authorization"}, status=status.HTTP_401_UNAUTHORIZED)
        except InvalidPayloadError:
            return Response(
                {"error": "Invalid payload - missing trackingNumber"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except DatabaseError:
            logger.exception("Error finding parts for webhook")
            return Response({"error": "Database error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except Exception:
            logger.exception("Webhook error")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(result.as_response(), status=status.HTTP_200_OK)

    def head(self, request):
        return Response(status=status.HTTP_200_OK)

    @extend_schema(responses={200: dict})
    def get(self, request):
        return Response(
            {"status": "ok", "message": "Ship24 tracking webhook endpoint is active"},
            status=status.HTTP_200_OK,
        )


# --------------------------------------------------------------------
# GET /api/v1/tracking/parts/{id}/  (단건 조회 + 즉시 동기화)
# --------------------------------------------------------------------
class PartTrackingAPI(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: dict})
    def get(self, request, pk: int):
        part = get_object_or_404(Part.objects.visible_to(request.user), pk=pk)

        if not part.tracking:
            return Response({"error": "Part has no tracking number"}, status=status.HTTP_400_BAD_REQUEST)

        # URL 로 저장된 운송장은 조회 대상이 아님
        if part.tracking.startswith("http"):
            return Response(
                {
                    "success": True,
                    "tracking": {"tracking_status": "External", "tracking_url": part.tracking},
                },
                status=status.HTTP_200_OK,
            )

        try:
            update = sync_part_tracking(part)
        except TrackingRateLimited:
            if part.tracking_status:
                return Response(
                    {
                        "success": True,
                        "tracking": TrackingSnapshotSerializer(part).data,
                        "rateLimited": True,
                        "rateLimitMessage": "API rate limit reached. Showing cached data.",
                    },
                    status=status.HTTP_200_OK,
                )
            return Response(
                {
                    "success": False,
                    "error": "API rate limit reached. Please try again later.",
                    "rateLimited": True,
                },
                status=status.HTTP_429_TOO_MANY_REQUESTS,
            )
        except TrackingProviderError as e:
            logger.warning("Tracking refresh failed for part %s: %s", part.pk, e)
            return Response({"error": "Failed to fetch tracking"}, status=status.HTTP_502_BAD_GATEWAY)

        if update is None:
            return Response({"success": True, "tracking": None, "skipped": True}, status=status.HTTP_200_OK)

        data = TrackingSnapshotSerializer({**update, "delivered": part.delivered}).data
        return Response({"success": True, "tracking": data}, status=status.HTTP_200_OK)


# --------------------------------------------------------------------
# POST /api/v1/tracking/refresh/   (?all=1 은 staff 만)
# --------------------------------------------------------------------
class RefreshTrackingsAPI(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        request=EmptySerializer,
        parameters=[OpenApiParameter(name="all", required=False, type=bool, description="staff only")],
        responses={200: dict},
    )
    def post(self, request):
        user = request.user
        refresh_all = str(request.query_params.get("all", "")).lower() in ("1", "true", "yes")
        target = None if (refresh_all and user.is_staff) else user

        results = refresh_active_trackings(user=target)
        return Response(
            {"success": True, "updated": len(results), "trackings": results},
            status=status.HTTP_200_OK,
        )
