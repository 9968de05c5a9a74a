# tests/conftest.py
from uuid import uuid4

from django.conf import settings
from django.contrib.auth import get_user_model

import pytest
from rest_framework.test import APIClient

from domains.parts.models import Part

User = get_user_model()


# ─────────────────────────────────────────────────────────────
# 전역 테스트 환경 최적화(해싱) + 외부 연동 값 초기화
# ─────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True, scope="session")
def _fast_password_hasher(django_db_setup, django_db_blocker):
    """
    해시 느린 기본 해셔 대신 MD5 해셔 사용
    """
    with django_db_blocker.unblock():
        settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture(autouse=True)
def _no_external_tracking(settings):
    """
    .env 에 값이 있어도 테스트는 항상 같은 조건에서:
    웹훅 인증 비활성, Ship24 키 없음
    """
    settings.TRACKING_WEBHOOK_SECRET = ""
    settings.SHIP24_API_KEY = ""


@pytest.fixture(autouse=True)
def _plain_static_storage(settings):
    """
    admin 템플릿 렌더링 시 collectstatic manifest 없이도 동작하도록
    """
    settings.STORAGES = {
        **settings.STORAGES,
        "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
    }


# ─────────────────────────────────────────────────────────────
# 클라이언트 & 인증
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user_factory(db):
    def _make(**kw):
        password = kw.pop("password", "Test1234!A")
        kw.setdefault("username", f"user_{uuid4().hex[:6]}")
        kw.setdefault("email", f"{kw['username']}@example.com")
        u = User.objects.create_user(password=password, **kw)
        # ✅ 로그인 테스트용 원문 비밀번호 보관
        u.raw_password = password
        return u

    return _make


@pytest.fixture
def user(user_factory):
    return user_factory()


@pytest.fixture
def staff_user(user_factory):
    return user_factory(is_staff=True)


@pytest.fixture
def auth_client(user):
    """
    SimpleJWT 토큰을 받아 Authorization 헤더 세팅된 APIClient 반환
    """
    c = APIClient()
    resp = c.post(
        "/api/v1/auth/token/",
        {"username": user.username, "password": user.raw_password},
        format="json",
    )
    assert resp.status_code == 200, getattr(resp, "data", resp.content)
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.data['access']}")
    return c


# ─────────────────────────────────────────────────────────────
# 부품 & 웹훅 payload
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def part_factory(db):
    def _make(**kw):
        kw.setdefault("part", "Front brake caliper")
        kw.setdefault("tracking", "")
        return Part.objects.create(**kw)

    return _make


@pytest.fixture
def webhook_payload():
    """
    사용법: webhook_payload("1Z999AA10123456784", milestone="delivered")
    events 는 최신순
    """

    def _make(tracking_number, milestone="in_transit", tracker_id="trk-001", eta="2024-03-08", events=None):
        if events is None:
            events = [
                {
                    "datetime": "2024-03-06T15:20:00Z",
                    "status": "Arrived at facility",
                    "statusMilestone": milestone,
                    "statusCode": "transit_arrived_at_facility",
                    "location": {"city": "Portland", "country": "US"},
                },
                {
                    "datetime": "2024-03-05T09:00:00Z",
                    "status": "Shipment information received",
                    "statusMilestone": "info_received",
                    "statusCode": "info_received",
                    "location": {"city": None, "country": "US"},
                },
            ]
        return {
            "trackerId": tracker_id,
            "trackingNumber": tracking_number,
            "shipment": {
                "statusMilestone": milestone,
                "delivery": {"estimatedDeliveryDate": eta},
            },
            "events": events,
        }

    return _make
