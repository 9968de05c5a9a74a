# domains/tracking/adapters/__init__.py
from .base import TrackingProviderAdapter
from .ship24 import Ship24Adapter, flatten_tracking


def get_adapter() -> TrackingProviderAdapter:
    """설정된 트래킹 제공자 어댑터 생성 (현재는 Ship24 하나)."""
    return Ship24Adapter()


__all__ = ["get_adapter", "Ship24Adapter", "TrackingProviderAdapter", "flatten_tracking"]
