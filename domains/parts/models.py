from __future__ import annotations

from django.conf import settings
from django.db import models

from domains.tracking.status_map import DeliveryStatus


class PartQuerySet(models.QuerySet):
    def visible_to(self, user):
        # staff 는 전체, 일반 유저는 본인 소유분만
        if getattr(user, "is_staff", False):
            return self
        return self.filter(user=user)

    def awaiting_delivery(self):
        return self.filter(shipped=True, delivered=False).exclude(tracking="")


class Part(models.Model):
    """
    구매한 부품 한 건. 트래킹 관련 필드만 모델링한다.
    tracking_* 필드는 웹훅/동기화 때마다 통째로 덮어쓰는 스냅샷.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="parts",
        null=True,
        blank=True,
    )
    part = models.CharField(max_length=200)
    tracking = models.CharField(max_length=255, blank=True, default="")

    shipped = models.BooleanField(default=False)
    # 한 번 True 가 되면 트래킹 업데이트로는 되돌리지 않는다
    delivered = models.BooleanField(default=False)

    ship24_id = models.CharField(max_length=64, null=True, blank=True)
    tracking_status = models.CharField(
        max_length=24, choices=DeliveryStatus.choices, null=True, blank=True
    )
    tracking_substatus = models.CharField(max_length=64, null=True, blank=True)
    tracking_location = models.CharField(max_length=120, null=True, blank=True)
    tracking_eta = models.CharField(max_length=40, null=True, blank=True)
    tracking_updated_at = models.DateTimeField(null=True, blank=True)
    tracking_checkpoints = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PartQuerySet.as_manager()

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["tracking"], name="parts_part_trackin_5b1c2e_idx"),
            models.Index(
                fields=["shipped", "delivered"], name="parts_part_shipped_9d0a41_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.part} ({self.tracking or '-'})"
