# domains/tracking/services.py
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from domains.parts.models import Part

from .adapters import TrackingProviderAdapter, get_adapter
from .exceptions import (
    InvalidPayloadError,
    TrackingProviderError,
    TrackingRateLimited,
    WebhookAuthError,
)
from .status_map import DeliveryStatus, normalize, should_skip_lookup

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------
# 웹훅 인증 설정
# --------------------------------------------------------------------
class AuthMode(str, Enum):
    DISABLED = "disabled"
    SHARED_SECRET = "shared_secret"


@dataclass(frozen=True)
class WebhookAuth:
    """
    secret 이 비어 있으면 DISABLED 모드: 모든 호출 통과 (호출마다 경고 로그).
    Authorization 헤더는 시크릿 원문 또는 "Bearer <secret>" 둘 다 허용.
    """

    secret: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "WebhookAuth":
        return cls(secret=getattr(settings, "TRACKING_WEBHOOK_SECRET", "") or None)

    @property
    def mode(self) -> AuthMode:
        return AuthMode.SHARED_SECRET if self.secret else AuthMode.DISABLED

    def check(self, authorization: Optional[str]) -> None:
        if self.mode is AuthMode.DISABLED:
            logger.warning("TRACKING_WEBHOOK_SECRET not configured, webhook auth is disabled")
            return

        header = (authorization or "").strip()
        if not header:
            raise WebhookAuthError("missing authorization header")

        token = header[len("Bearer "):].strip() if header.startswith("Bearer ") else header
        if not hmac.compare_digest(token.encode("utf-8"), self.secret.encode("utf-8")):
            raise WebhookAuthError("authorization mismatch")


# --------------------------------------------------------------------
# payload → TrackingUpdate
# --------------------------------------------------------------------
def _location_text(location: Any) -> Optional[str]:
    # 웹훅은 {city, country}, 조회 API 는 문자열로 올 때가 있음
    if isinstance(location, dict):
        text = location.get("city") or location.get("country")
    elif isinstance(location, str):
        text = location
    else:
        text = None
    return text[:120] if text else None


def _checkpoint(event: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "time": event.get("datetime") or event.get("occurrenceDatetime"),
        "message": event.get("status"),
        "location": _location_text(event.get("location")),
        "status": normalize(event.get("statusMilestone")).value,
        "statusCode": event.get("statusCode"),
    }


def build_tracking_update(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    events 는 최신순(0번이 가장 최근)으로 온다고 가정.
    반환값은 Part 에 그대로 저장되는 스냅샷 필드들.
    """
    shipment = payload.get("shipment") or {}
    events = [e for e in (payload.get("events") or []) if isinstance(e, dict)]
    latest = events[0] if events else {}

    status = normalize(shipment.get("statusMilestone") or latest.get("statusMilestone"))
    delivery = shipment.get("delivery") or {}

    return {
        "ship24_id": payload.get("trackerId"),
        "tracking_status": status.value,
        "tracking_substatus": latest.get("statusCode") or None,
        "tracking_location": _location_text(latest.get("location")),
        "tracking_eta": delivery.get("estimatedDeliveryDate") or None,
        "tracking_updated_at": timezone.now(),
        "tracking_checkpoints": [_checkpoint(e) for e in events],
    }


def apply_tracking_update(part: Part, update: Dict[str, Any]) -> bool:
    """
    스냅샷을 통째로 덮어쓰고 delivered 래치를 적용.
    반환: 이번 업데이트로 delivered 가 새로 True 가 됐는지
    """
    fields = dict(update)
    newly_delivered = update.get("tracking_status") == DeliveryStatus.DELIVERED and not part.delivered
    if newly_delivered:
        fields["delivered"] = True
    fields["updated_at"] = timezone.now()

    # 트랜잭션으로 묶지 않는다: 한 건 실패가 다른 부품 업데이트를 막으면 안 됨
    Part.objects.filter(pk=part.pk).update(**fields)
    return newly_delivered


# --------------------------------------------------------------------
# 웹훅 수신 처리
# --------------------------------------------------------------------
@dataclass
class IngestResult:
    tracking_number: str
    matched: int = 0
    updated: int = 0
    failed: int = 0
    first_error: Optional[BaseException] = None

    def as_response(self) -> Dict[str, Any]:
        if not self.matched:
            return {"success": True, "message": "No matching part"}
        return {"success": True, "updated": self.updated}


class TrackingUpdateIngestor:
    def __init__(self, auth: WebhookAuth, parts=None):
        self.auth = auth
        self._parts = parts

    @property
    def parts(self):
        return self._parts if self._parts is not None else Part.objects

    @staticmethod
    def _tracking_number(payload: Any) -> str:
        if not isinstance(payload, dict):
            raise InvalidPayloadError("payload must be an object")
        tracking_number = payload.get("trackingNumber")
        if not tracking_number or not isinstance(tracking_number, str):
            raise InvalidPayloadError("missing trackingNumber")
        return tracking_number

    def ingest(self, payload: Any, authorization: Optional[str] = None) -> IngestResult:
        """
        인증 → 검증 → 부품 조회 → 스냅샷 생성 → 부품별 독립 업데이트.
        조회 자체가 실패하면 DatabaseError 를 그대로 올린다.
        """
        self.auth.check(authorization)
        tracking_number = self._tracking_number(payload)

        matches = list(self.parts.filter(tracking=tracking_number).only("id", "delivered"))
        result = IngestResult(tracking_number=tracking_number, matched=len(matches))
        if not matches:
            # 다른 경로로 등록된 운송장일 수 있음
            logger.info("No part found for tracking %s", tracking_number)
            return result

        update = build_tracking_update(payload)
        for part in matches:
            try:
                newly_delivered = apply_tracking_update(part, update)
            except Exception as e:
                result.failed += 1
                if result.first_error is None:
                    result.first_error = e
                logger.exception("Error updating part %s for tracking %s", part.pk, tracking_number)
                continue
            result.updated += 1
            if newly_delivered:
                logger.info("Part %s marked delivered (tracking %s)", part.pk, tracking_number)

        logger.info(
            "Tracking %s → %s: %d/%d parts updated",
            tracking_number,
            update["tracking_status"],
            result.updated,
            result.matched,
        )
        return result


# --------------------------------------------------------------------
# 제공자 동기화 (등록/조회/폴링)
# --------------------------------------------------------------------
def register_part_tracking(part: Part, adapter: Optional[TrackingProviderAdapter] = None) -> Optional[str]:
    """
    Ship24 에 운송장 등록 후 tracker id 저장.
    URL/TBA/글자만 있는 값은 등록하지 않는다 (API 비용).
    """
    if should_skip_lookup(part.tracking):
        logger.debug("Skipping provider registration for part %s (%r)", part.pk, part.tracking)
        return None

    adapter = adapter or get_adapter()
    tracker_id = adapter.register_tracking(part.tracking, title=part.part)
    if tracker_id:
        Part.objects.filter(pk=part.pk).update(ship24_id=tracker_id)
        part.ship24_id = tracker_id
    return tracker_id


def sync_part_tracking(part: Part, adapter: Optional[TrackingProviderAdapter] = None) -> Optional[Dict[str, Any]]:
    """
    외부 API 에서 최신 상태 조회 → 스냅샷 저장(+delivered 래치).
    조회 대상이 아니면 None.
    """
    if should_skip_lookup(part.tracking):
        return None

    adapter = adapter or get_adapter()
    if part.ship24_id:
        raw = adapter.fetch_tracking_by_tracker(part.ship24_id)
    else:
        raw = adapter.fetch_tracking(part.tracking)

    raw = dict(raw or {})
    raw.setdefault("trackingNumber", part.tracking)
    update = build_tracking_update(raw)
    if not update["ship24_id"]:
        update["ship24_id"] = part.ship24_id

    newly_delivered = apply_tracking_update(part, update)
    for name, value in update.items():
        setattr(part, name, value)
    if newly_delivered:
        part.delivered = True
    return update


def refresh_active_trackings(user=None, adapter: Optional[TrackingProviderAdapter] = None) -> List[Dict[str, Any]]:
    """배송완료 전인 부품 전체 동기화. 부품 하나의 실패가 전체를 멈추지 않는다."""
    qs = Part.objects.awaiting_delivery()
    if user is not None:
        qs = qs.filter(user=user)

    adapter = adapter or get_adapter()
    results: List[Dict[str, Any]] = []
    for part in qs.iterator():
        try:
            update = sync_part_tracking(part, adapter=adapter)
        except TrackingRateLimited:
            logger.warning("Rate limited while refreshing trackings, stopping at part %s", part.pk)
            break
        except (TrackingProviderError, DatabaseError):
            logger.exception("Failed to sync tracking for part %s", part.pk)
            continue
        if update:
            results.append({"part_id": part.pk, **update})
    return results
