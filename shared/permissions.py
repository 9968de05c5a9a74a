# shared/permissions.py
from __future__ import annotations

from typing import Optional

from rest_framework.permissions import SAFE_METHODS, BasePermission

# ---- helpers ---------------------------------------------------------------


def _is_schema_generation(view) -> bool:
    """drf-spectacular 스키마 생성 시 True (권한을 널널하게 통과시켜 문서 생성 편의)."""
    return bool(getattr(view, "swagger_fake_view", False))


def _get_owner_id(obj) -> Optional[int | str]:
    """
    여러 도메인에서 통용되도록 owner id를 추정.
    우선순위: user_id, owner_id → user.pk, owner.pk
    """
    for k in ("user_id", "owner_id"):
        if hasattr(obj, k):
            return getattr(obj, k)

    for k in ("user", "owner"):
        related = getattr(obj, k, None)
        if related is not None:
            return getattr(related, "pk", None)

    return None


# ---- owner-based permissions ----------------------------------------------


class IsOwnerOrStaff(BasePermission):
    """
    SAFE_METHODS(GET/HEAD/OPTIONS)은 모두 허용.
    그 외 메서드는 (staff) 또는 (obj의 owner == 현재 유저)만 허용.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        if _is_schema_generation(view):
            return True

        user = request.user
        if not getattr(user, "is_authenticated", False):
            return False
        if getattr(user, "is_staff", False):
            return True

        owner_id = _get_owner_id(obj)
        return owner_id is not None and owner_id == getattr(user, "pk", None)


__all__ = ["IsOwnerOrStaff"]
