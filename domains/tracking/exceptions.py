# domains/tracking/exceptions.py
from __future__ import annotations


class TrackingError(Exception):
    pass


class WebhookAuthError(TrackingError):
    """웹훅 시크릿 누락/불일치 → 401"""


class InvalidPayloadError(TrackingError):
    """필수 필드(trackingNumber) 누락 → 400"""


class TrackingProviderError(TrackingError):
    """외부 트래킹 API(Ship24) 호출 실패"""


class TrackingRateLimited(TrackingProviderError):
    """Ship24 가 429 를 돌려준 경우"""
