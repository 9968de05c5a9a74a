from __future__ import annotations

from rest_framework import serializers

from domains.tracking.carriers import classify
from domains.tracking.status_map import get_status_display, tracking_progress, tracking_purge_fields

from .models import Part


# ---------------------------
# 출력/입력 공용: PartSerializer
# carrier_name / tracking_url 은 저장하지 않고 매번 분류한다
# ---------------------------
class PartSerializer(serializers.ModelSerializer):
    carrier_name = serializers.SerializerMethodField()
    tracking_url = serializers.SerializerMethodField()
    tracking_status_label = serializers.SerializerMethodField()
    tracking_progress = serializers.SerializerMethodField()

    class Meta:
        model = Part
        fields = (
            "id",
            "part",
            "tracking",
            "shipped",
            "delivered",
            "carrier_name",
            "tracking_url",
            "ship24_id",
            "tracking_status",
            "tracking_status_label",
            "tracking_progress",
            "tracking_substatus",
            "tracking_location",
            "tracking_eta",
            "tracking_updated_at",
            "tracking_checkpoints",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "ship24_id",
            "tracking_status",
            "tracking_substatus",
            "tracking_location",
            "tracking_eta",
            "tracking_updated_at",
            "tracking_checkpoints",
            "created_at",
            "updated_at",
        )

    def get_carrier_name(self, obj) -> str | None:
        return classify(obj.tracking).carrier_name

    def get_tracking_url(self, obj) -> str | None:
        return classify(obj.tracking).tracking_url

    def get_tracking_status_label(self, obj) -> str | None:
        if not obj.tracking_status:
            return None
        return get_status_display(obj.tracking_status)["label"]

    def get_tracking_progress(self, obj) -> int:
        return tracking_progress(obj.tracking_status)

    def validate_tracking(self, value: str) -> str:
        return (value or "").strip()

    def update(self, instance, validated_data):
        new_tracking = validated_data.get("tracking", instance.tracking)
        if new_tracking != instance.tracking:
            # 운송장이 바뀌면 이전 스냅샷은 의미 없음
            for name, value in tracking_purge_fields().items():
                setattr(instance, name, value)
        return super().update(instance, validated_data)
