# domains/tracking/tasks.py
from __future__ import annotations

import logging

from celery import shared_task

from .exceptions import TrackingProviderError, TrackingRateLimited

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, retry_backoff=True, retry_jitter=True, acks_late=True,
             name="domains.tracking.tasks.refresh_part_tracking")
def refresh_part_tracking(self, part_id: int) -> bool:
    """
    단일 부품 폴링 → Ship24 조회 → 스냅샷 저장
    반환: 실제로 조회/저장했는지 (조회 대상이 아니면 False)
    """
    from domains.parts.models import Part
    from .services import sync_part_tracking

    part = Part.objects.filter(pk=part_id).first()
    if part is None:
        return False
    try:
        return sync_part_tracking(part) is not None
    except TrackingRateLimited:
        # 다음 주기에 다시 도는 것으로 충분
        logger.warning("Rate limited, skipping part %s this round", part_id)
        return False
    except TrackingProviderError as e:
        raise self.retry(exc=e)


@shared_task(name="domains.tracking.tasks.poll_active_parts")
def poll_active_parts() -> int:
    """
    배송완료 전인 부품만 순회 폴링
    """
    from domains.parts.models import Part
    from .status_map import should_skip_lookup

    queued = 0
    for part in Part.objects.awaiting_delivery().only("id", "tracking").iterator():
        if should_skip_lookup(part.tracking):
            continue
        refresh_part_tracking.delay(part.pk)
        queued += 1
    return queued
