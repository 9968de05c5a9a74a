# domains/tracking/adapters/base.py
from typing import Any, Dict, Optional


class TrackingProviderAdapter:
    """
    외부 트래킹 서비스 어댑터의 최소 공통 인터페이스.
    fetch_* 는 웹훅 payload 와 같은 모양
    ({trackerId, trackingNumber, shipment, events}) 을 돌려줘야 한다.
    """

    def register_tracking(self, tracking_number: str, *, title: Optional[str] = None) -> Optional[str]:
        """
        (옵션) 외부 서비스에 운송장 등록. 등록된 tracker id 를 반환.
        기본 구현은 no-op.
        """
        return None

    def fetch_tracking(self, tracking_number: str) -> Dict[str, Any]:
        """기본 구현은 이벤트 없음."""
        return {"trackingNumber": tracking_number, "shipment": {}, "events": []}

    def fetch_tracking_by_tracker(self, tracker_id: str) -> Dict[str, Any]:
        return {"trackerId": tracker_id, "shipment": {}, "events": []}
