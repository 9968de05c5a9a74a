# domains/tracking/adapters/ship24.py
import logging
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from ..exceptions import TrackingProviderError, TrackingRateLimited
from .base import TrackingProviderAdapter

logger = logging.getLogger(__name__)


def flatten_tracking(tracking: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ship24 의 trackings[] 한 건 → 웹훅 payload 모양으로 평탄화.
    {tracker:{trackerId, trackingNumber}, shipment, events} → {trackerId, trackingNumber, shipment, events}
    """
    tracker = tracking.get("tracker") or {}
    return {
        "trackerId": tracker.get("trackerId"),
        "trackingNumber": tracker.get("trackingNumber"),
        "shipment": tracking.get("shipment") or {},
        "events": tracking.get("events") or [],
    }


class Ship24Adapter(TrackingProviderAdapter):
    """
    Ship24 Public API v1 연동 어댑터
    """

    timeout = 10

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key if api_key is not None else getattr(settings, "SHIP24_API_KEY", "")
        self.base_url = (
            base_url or getattr(settings, "SHIP24_API_BASE_URL", "") or "https://api.ship24.com/public/v1"
        ).rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json; charset=utf-8",
        }

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.enabled:
            raise TrackingProviderError("Ship24 API key not configured")

        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(method, url, headers=self._headers(), json=body, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error("Ship24 timeout: %s %s", method, path)
            raise TrackingProviderError("Ship24 request timed out") from e
        except requests.RequestException as e:
            logger.error("Ship24 request failed: %s", e)
            raise TrackingProviderError(f"Ship24 request failed: {e}") from e

        if resp.status_code == 429:
            logger.warning("Ship24 rate limit reached: %s %s", method, path)
            raise TrackingRateLimited("Ship24 rate limit reached")
        if not (200 <= resp.status_code < 300):
            logger.warning("Ship24 non-2xx: %s %s", resp.status_code, resp.text[:500])
            raise TrackingProviderError(f"Ship24 responded with {resp.status_code}")

        try:
            return resp.json()
        except ValueError as e:
            raise TrackingProviderError("Invalid Ship24 JSON response") from e

    def register_tracking(self, tracking_number: str, *, title: Optional[str] = None) -> Optional[str]:
        body: Dict[str, Any] = {"trackingNumber": tracking_number}
        if title:
            body["shipmentReference"] = title
        logger.info("Registering Ship24 tracker for %s", tracking_number)
        data = self._request("POST", "/trackers", body)
        tracker = (data.get("data") or {}).get("tracker") or {}
        return tracker.get("trackerId")

    def fetch_tracking(self, tracking_number: str) -> Dict[str, Any]:
        data = self._request("POST", "/trackers/track", {"trackingNumber": tracking_number})
        return self._first_tracking(data, tracking_number=tracking_number)

    def fetch_tracking_by_tracker(self, tracker_id: str) -> Dict[str, Any]:
        data = self._request("GET", f"/trackers/{tracker_id}/results")
        payload = self._first_tracking(data)
        payload["trackerId"] = payload.get("trackerId") or tracker_id
        return payload

    def _first_tracking(self, data: Dict[str, Any], tracking_number: Optional[str] = None) -> Dict[str, Any]:
        trackings: List[Dict[str, Any]] = (data.get("data") or {}).get("trackings") or []
        if not trackings:
            return {"trackingNumber": tracking_number, "shipment": {}, "events": []}
        payload = flatten_tracking(trackings[0])
        if tracking_number and not payload.get("trackingNumber"):
            payload["trackingNumber"] = tracking_number
        return payload
