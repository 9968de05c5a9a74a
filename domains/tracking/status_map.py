# domains/tracking/status_map.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from django.db import models

logger = logging.getLogger(__name__)


class DeliveryStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    INFO_RECEIVED = "InfoReceived", "Label Created"
    IN_TRANSIT = "InTransit", "In Transit"
    OUT_FOR_DELIVERY = "OutForDelivery", "Out for Delivery"
    ATTEMPT_FAIL = "AttemptFail", "Delivery Failed"
    DELIVERED = "Delivered", "Delivered"
    AVAILABLE_FOR_PICKUP = "AvailableForPickup", "Ready for Pickup"
    EXCEPTION = "Exception", "Exception"
    EXPIRED = "Expired", "Expired"


# Ship24 statusMilestone → 내부 상태 (대소문자 구분, 정확히 일치하는 값만)
MILESTONE_TO_STATUS: Dict[str, DeliveryStatus] = {
    "pending": DeliveryStatus.PENDING,
    "info_received": DeliveryStatus.INFO_RECEIVED,
    "in_transit": DeliveryStatus.IN_TRANSIT,
    "out_for_delivery": DeliveryStatus.OUT_FOR_DELIVERY,
    "attempt_fail": DeliveryStatus.ATTEMPT_FAIL,
    "delivered": DeliveryStatus.DELIVERED,
    "available_for_pickup": DeliveryStatus.AVAILABLE_FOR_PICKUP,
    "exception": DeliveryStatus.EXCEPTION,
    "expired": DeliveryStatus.EXPIRED,
}


def normalize(status_milestone: Optional[str]) -> DeliveryStatus:
    """
    provider milestone 문자열을 DeliveryStatus 로 변환.
    모르는 값/None 은 Pending (에러 아님). 단, 값이 있었는데 모르는 경우는 경고 로그.
    """
    status = MILESTONE_TO_STATUS.get(status_milestone) if isinstance(status_milestone, str) else None
    if status is not None:
        return status
    if status_milestone:
        logger.warning("Unknown statusMilestone %r, falling back to Pending", status_milestone)
    return DeliveryStatus.PENDING


_LETTERS_ONLY = re.compile(r"^[a-zA-Z\s]+$")


def should_skip_lookup(tracking: Optional[str]) -> bool:
    """True 이면 외부 트래킹 API(등록/조회)를 호출하지 않는다."""
    if not tracking:
        return True
    if tracking.startswith("http"):
        return True
    # Amazon Logistics (TBA...) 는 Ship24 가 추적 못 함
    if tracking.upper().startswith("TBA"):
        return True
    # "USPS", "Local" 처럼 글자만 있는 값
    if _LETTERS_ONLY.match(tracking.strip()):
        return True
    return False


# --------------------------------------------------------------------
# 표시용 메타데이터
# --------------------------------------------------------------------
STATUS_DISPLAY: Dict[str, Dict[str, str]] = {
    DeliveryStatus.PENDING: {
        "label": "Pending",
        "short_label": "Pending",
        "description": "Tracking created, waiting for carrier update",
        "color": "gray",
    },
    DeliveryStatus.INFO_RECEIVED: {
        "label": "Label Created",
        "short_label": "Label",
        "description": "Carrier received shipment information",
        "color": "blue",
    },
    DeliveryStatus.IN_TRANSIT: {
        "label": "In Transit",
        "short_label": "Transit",
        "description": "Package is on its way",
        "color": "indigo",
    },
    DeliveryStatus.OUT_FOR_DELIVERY: {
        "label": "Out for Delivery",
        "short_label": "Out",
        "description": "Package is out for delivery today",
        "color": "amber",
    },
    DeliveryStatus.ATTEMPT_FAIL: {
        "label": "Delivery Failed",
        "short_label": "Failed",
        "description": "Delivery attempt was unsuccessful",
        "color": "orange",
    },
    DeliveryStatus.DELIVERED: {
        "label": "Delivered",
        "short_label": "Delivered",
        "description": "Package has been delivered",
        "color": "green",
    },
    DeliveryStatus.AVAILABLE_FOR_PICKUP: {
        "label": "Ready for Pickup",
        "short_label": "Pickup",
        "description": "Package is available for pickup",
        "color": "cyan",
    },
    DeliveryStatus.EXCEPTION: {
        "label": "Exception",
        "short_label": "Issue",
        "description": "There is an issue with the shipment",
        "color": "red",
    },
    DeliveryStatus.EXPIRED: {
        "label": "Expired",
        "short_label": "Expired",
        "description": "No updates for extended period",
        "color": "gray",
    },
}

_PROGRESS = {
    DeliveryStatus.PENDING: 10,
    DeliveryStatus.INFO_RECEIVED: 20,
    DeliveryStatus.IN_TRANSIT: 50,
    DeliveryStatus.OUT_FOR_DELIVERY: 80,
    DeliveryStatus.ATTEMPT_FAIL: 70,
    DeliveryStatus.AVAILABLE_FOR_PICKUP: 90,
    DeliveryStatus.DELIVERED: 100,
    DeliveryStatus.EXCEPTION: 50,
    DeliveryStatus.EXPIRED: 0,
}


def get_status_display(status: Optional[str]) -> Dict[str, str]:
    return STATUS_DISPLAY.get(status, STATUS_DISPLAY[DeliveryStatus.PENDING])


def tracking_progress(status: Optional[str]) -> int:
    return _PROGRESS.get(status, 0)


def status_update_recommendation(status: Optional[str]) -> Optional[Dict[str, Any]]:
    if status == DeliveryStatus.DELIVERED:
        return {"delivered": True, "message": "Package delivered"}
    if status in (DeliveryStatus.IN_TRANSIT, DeliveryStatus.OUT_FOR_DELIVERY):
        return {"shipped": True, "message": "Package in transit"}
    return None


TRACKING_PROJECTION_FIELDS = (
    "ship24_id",
    "tracking_status",
    "tracking_substatus",
    "tracking_location",
    "tracking_eta",
    "tracking_updated_at",
    "tracking_checkpoints",
)


def tracking_purge_fields() -> Dict[str, None]:
    """운송장 번호가 바뀌면 이전 트래킹 스냅샷을 모두 비운다."""
    return {name: None for name in TRACKING_PROJECTION_FIELDS}
