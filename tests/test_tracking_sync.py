"""
Ship24 동기화 테스트: services.sync/refresh, 단건 조회 API, 일괄 갱신 API, celery task
"""
from unittest.mock import patch

import pytest

from domains.tracking import tasks
from domains.tracking.adapters import TrackingProviderAdapter
from domains.tracking.exceptions import TrackingProviderError, TrackingRateLimited
from domains.tracking.services import refresh_active_trackings, register_part_tracking, sync_part_tracking


class FakeAdapter(TrackingProviderAdapter):
    """
    tracking_number 별로 milestone 또는 예외를 돌려주는 가짜 어댑터
    호출 기록은 calls 에 남긴다
    """

    def __init__(self, results=None, tracker_id="trk-new"):
        self.results = results or {}
        self.tracker_id = tracker_id
        self.calls = []

    def _payload(self, key, tracking_number, tracker_id=None):
        result = self.results.get(key, "in_transit")
        if isinstance(result, Exception):
            raise result
        return {
            "trackerId": tracker_id,
            "trackingNumber": tracking_number,
            "shipment": {"statusMilestone": result, "delivery": {"estimatedDeliveryDate": "2024-03-08"}},
            "events": [
                {
                    "datetime": "2024-03-06T15:20:00Z",
                    "status": "Scanned",
                    "statusMilestone": result,
                    "statusCode": "scan",
                    "location": "Reno, NV",
                }
            ],
        }

    def register_tracking(self, tracking_number, *, title=None):
        self.calls.append(("register", tracking_number, title))
        return self.tracker_id

    def fetch_tracking(self, tracking_number):
        self.calls.append(("fetch", tracking_number))
        return self._payload(tracking_number, tracking_number)

    def fetch_tracking_by_tracker(self, tracker_id):
        self.calls.append(("fetch_by_tracker", tracker_id))
        return self._payload(tracker_id, None, tracker_id=tracker_id)


# ─────────────────────────────────────────────────────────────
# register / sync
# ─────────────────────────────────────────────────────────────
@pytest.mark.django_db
class TestRegisterPartTracking:
    def test_registers_and_stores_tracker_id(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784")
        adapter = FakeAdapter()

        assert register_part_tracking(part, adapter=adapter) == "trk-new"

        assert adapter.calls == [("register", "1Z999AA10123456784", "Front brake caliper")]
        part.refresh_from_db()
        assert part.ship24_id == "trk-new"

    @pytest.mark.parametrize("tracking", ["", "TBA123456789012", "https://amzn.to/x", "Local pickup"])
    def test_skipped_values_never_call_provider(self, part_factory, tracking):
        adapter = FakeAdapter()
        assert register_part_tracking(part_factory(tracking=tracking), adapter=adapter) is None
        assert adapter.calls == []


@pytest.mark.django_db
class TestSyncPartTracking:
    def test_fetch_by_tracking_number(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", shipped=True)
        adapter = FakeAdapter()

        update = sync_part_tracking(part, adapter=adapter)

        assert adapter.calls == [("fetch", "1Z999AA10123456784")]
        assert update["tracking_status"] == "InTransit"
        assert update["tracking_location"] == "Reno, NV"
        part.refresh_from_db()
        assert part.tracking_status == "InTransit"
        assert part.tracking_checkpoints[0]["statusCode"] == "scan"

    def test_uses_tracker_id_when_known(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", ship24_id="trk-777")
        adapter = FakeAdapter()

        update = sync_part_tracking(part, adapter=adapter)

        assert adapter.calls == [("fetch_by_tracker", "trk-777")]
        assert update["ship24_id"] == "trk-777"

    def test_keeps_existing_tracker_id_when_response_has_none(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", ship24_id="trk-777")
        adapter = FakeAdapter()
        adapter.fetch_tracking_by_tracker = lambda tracker_id: {"shipment": {}, "events": []}

        sync_part_tracking(part, adapter=adapter)

        part.refresh_from_db()
        assert part.ship24_id == "trk-777"

    def test_delivered_latch_applies(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", shipped=True)
        sync_part_tracking(part, adapter=FakeAdapter({"1Z999AA10123456784": "delivered"}))
        assert part.delivered is True
        part.refresh_from_db()
        assert part.delivered is True

    def test_skip_returns_none(self, part_factory):
        adapter = FakeAdapter()
        assert sync_part_tracking(part_factory(tracking="TBA123456789012"), adapter=adapter) is None
        assert adapter.calls == []

    def test_provider_error_propagates(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784")
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingProviderError("boom")})
        with pytest.raises(TrackingProviderError):
            sync_part_tracking(part, adapter=adapter)
        part.refresh_from_db()
        assert part.tracking_status is None


@pytest.mark.django_db
class TestRefreshActiveTrackings:
    def test_only_shipped_and_undelivered(self, part_factory):
        active = part_factory(tracking="1Z999AA10123456784", shipped=True)
        part_factory(tracking="1Z999AA10123456785", shipped=False)
        part_factory(tracking="1Z999AA10123456786", shipped=True, delivered=True)
        part_factory(tracking="", shipped=True)

        results = refresh_active_trackings(adapter=FakeAdapter())

        assert [r["part_id"] for r in results] == [active.pk]

    def test_filters_by_user(self, part_factory, user_factory):
        alice, bob = user_factory(), user_factory()
        mine = part_factory(user=alice, tracking="1Z999AA10123456784", shipped=True)
        part_factory(user=bob, tracking="1Z999AA10123456785", shipped=True)

        results = refresh_active_trackings(user=alice, adapter=FakeAdapter())

        assert [r["part_id"] for r in results] == [mine.pk]

    def test_provider_error_skips_one_part(self, part_factory):
        part_factory(tracking="1Z999AA10123456784", shipped=True)
        ok = part_factory(tracking="1Z999AA10123456785", shipped=True)
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingProviderError("boom")})

        results = refresh_active_trackings(adapter=adapter)

        assert [r["part_id"] for r in results] == [ok.pk]

    def test_rate_limit_stops_the_loop(self, part_factory):
        part_factory(tracking="1Z999AA10123456784", shipped=True)
        part_factory(tracking="1Z999AA10123456785", shipped=True)
        adapter = FakeAdapter(
            {
                "1Z999AA10123456784": TrackingRateLimited("429"),
                "1Z999AA10123456785": TrackingRateLimited("429"),
            }
        )

        assert refresh_active_trackings(adapter=adapter) == []
        # 첫 429 이후로는 더 부르지 않음
        assert len(adapter.calls) == 1

    def test_skipped_parts_are_not_reported(self, part_factory):
        part_factory(tracking="TBA123456789012", shipped=True)
        assert refresh_active_trackings(adapter=FakeAdapter()) == []


# ─────────────────────────────────────────────────────────────
# GET /api/v1/tracking/parts/{id}/
# ─────────────────────────────────────────────────────────────
def _part_url(pk):
    return f"/api/v1/tracking/parts/{pk}/"


@pytest.mark.django_db
class TestPartTrackingAPI:
    def test_requires_login(self, api_client, part_factory):
        part = part_factory(tracking="1Z999AA10123456784")
        assert api_client.get(_part_url(part.pk)).status_code == 401

    def test_refreshes_and_returns_snapshot(self, auth_client, user, part_factory):
        part = part_factory(user=user, tracking="1Z999AA10123456784", shipped=True)
        with patch("domains.tracking.services.get_adapter", return_value=FakeAdapter()):
            res = auth_client.get(_part_url(part.pk))

        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["tracking"]["tracking_status"] == "InTransit"
        assert body["tracking"]["delivered"] is False
        assert body["tracking"]["tracking_checkpoints"][0]["location"] == "Reno, NV"

    def test_other_users_part_is_404(self, auth_client, user_factory, part_factory):
        part = part_factory(user=user_factory(), tracking="1Z999AA10123456784")
        assert auth_client.get(_part_url(part.pk)).status_code == 404

    def test_no_tracking_number(self, auth_client, user, part_factory):
        part = part_factory(user=user, tracking="")
        res = auth_client.get(_part_url(part.pk))
        assert res.status_code == 400
        assert res.json() == {"error": "Part has no tracking number"}

    def test_url_tracking_is_external(self, auth_client, user, part_factory):
        part = part_factory(user=user, tracking="https://www.example-carrier.test/track/ABC")
        res = auth_client.get(_part_url(part.pk))
        assert res.status_code == 200
        assert res.json()["tracking"] == {
            "tracking_status": "External",
            "tracking_url": "https://www.example-carrier.test/track/ABC",
        }

    def test_skipped_lookup(self, auth_client, user, part_factory):
        part = part_factory(user=user, tracking="TBA123456789012")
        res = auth_client.get(_part_url(part.pk))
        assert res.json() == {"success": True, "tracking": None, "skipped": True}

    def test_rate_limited_returns_cached(self, auth_client, user, part_factory):
        part = part_factory(
            user=user,
            tracking="1Z999AA10123456784",
            tracking_status="InTransit",
            tracking_location="Portland",
        )
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingRateLimited("429")})
        with patch("domains.tracking.services.get_adapter", return_value=adapter):
            res = auth_client.get(_part_url(part.pk))

        assert res.status_code == 200
        body = res.json()
        assert body["rateLimited"] is True
        assert body["tracking"]["tracking_status"] == "InTransit"
        assert body["tracking"]["tracking_location"] == "Portland"

    def test_rate_limited_without_cache(self, auth_client, user, part_factory):
        part = part_factory(user=user, tracking="1Z999AA10123456784")
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingRateLimited("429")})
        with patch("domains.tracking.services.get_adapter", return_value=adapter):
            res = auth_client.get(_part_url(part.pk))
        assert res.status_code == 429
        assert res.json()["rateLimited"] is True

    def test_provider_error_is_502(self, auth_client, user, part_factory):
        part = part_factory(user=user, tracking="1Z999AA10123456784")
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingProviderError("boom")})
        with patch("domains.tracking.services.get_adapter", return_value=adapter):
            res = auth_client.get(_part_url(part.pk))
        assert res.status_code == 502
        assert res.json() == {"error": "Failed to fetch tracking"}


# ─────────────────────────────────────────────────────────────
# POST /api/v1/tracking/refresh/
# ─────────────────────────────────────────────────────────────
@pytest.mark.django_db
class TestRefreshTrackingsAPI:
    URL = "/api/v1/tracking/refresh/"

    def _setup(self, part_factory, user, other):
        part_factory(user=user, tracking="1Z999AA10123456784", shipped=True)
        part_factory(user=other, tracking="1Z999AA10123456785", shipped=True)

    def test_user_refreshes_own_parts_only(self, auth_client, user, user_factory, part_factory):
        self._setup(part_factory, user, user_factory())
        with patch("domains.tracking.services.get_adapter", return_value=FakeAdapter()):
            res = auth_client.post(self.URL + "?all=1")
        assert res.status_code == 200
        assert res.json()["updated"] == 1

    def test_staff_can_refresh_all(self, api_client, staff_user, user_factory, part_factory):
        self._setup(part_factory, user_factory(), user_factory())
        api_client.force_authenticate(staff_user)
        with patch("domains.tracking.services.get_adapter", return_value=FakeAdapter()):
            res = api_client.post(self.URL + "?all=1")
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["updated"] == 2
        assert {t["tracking_status"] for t in body["trackings"]} == {"InTransit"}

    def test_requires_login(self, api_client):
        assert api_client.post(self.URL).status_code == 401


# ─────────────────────────────────────────────────────────────
# Celery tasks (브로커 없이 직접 호출)
# ─────────────────────────────────────────────────────────────
@pytest.mark.django_db
class TestTasks:
    def test_poll_queues_only_lookup_targets(self, part_factory):
        a = part_factory(tracking="1Z999AA10123456784", shipped=True)
        part_factory(tracking="TBA123456789012", shipped=True)
        part_factory(tracking="1Z999AA10123456785", shipped=True, delivered=True)

        with patch.object(tasks.refresh_part_tracking, "delay") as delay:
            assert tasks.poll_active_parts() == 1

        delay.assert_called_once_with(a.pk)

    def test_refresh_part_tracking(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", shipped=True)
        with patch("domains.tracking.services.get_adapter", return_value=FakeAdapter()):
            assert tasks.refresh_part_tracking(part.pk) is True
        part.refresh_from_db()
        assert part.tracking_status == "InTransit"

    def test_refresh_missing_part(self):
        assert tasks.refresh_part_tracking(999999) is False

    def test_refresh_rate_limited_is_not_retried(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", shipped=True)
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingRateLimited("429")})
        with patch("domains.tracking.services.get_adapter", return_value=adapter):
            assert tasks.refresh_part_tracking(part.pk) is False

    def test_refresh_provider_error_retries(self, part_factory):
        part = part_factory(tracking="1Z999AA10123456784", shipped=True)
        adapter = FakeAdapter({"1Z999AA10123456784": TrackingProviderError("boom")})
        # 직접 호출 시 retry 는 원래 예외를 다시 올린다
        with patch("domains.tracking.services.get_adapter", return_value=adapter):
            with pytest.raises(TrackingProviderError):
                tasks.refresh_part_tracking(part.pk)
