from __future__ import annotations

from rest_framework import serializers


# ---------------------------
# 웹훅 입력 (문서화용)
# 실제 검증은 TrackingUpdateIngestor 가 한다: 400/401 응답 모양이 고정이라서
# ---------------------------
class WebhookLocationSerializer(serializers.Serializer):
    city = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    country = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class WebhookEventSerializer(serializers.Serializer):
    datetime = serializers.CharField(required=False, allow_null=True)
    status = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    statusMilestone = serializers.CharField(required=False, allow_null=True)
    statusCode = serializers.CharField(required=False, allow_null=True)
    location = WebhookLocationSerializer(required=False, allow_null=True)


class WebhookDeliverySerializer(serializers.Serializer):
    estimatedDeliveryDate = serializers.CharField(required=False, allow_null=True)


class WebhookShipmentSerializer(serializers.Serializer):
    statusMilestone = serializers.CharField(required=False, allow_null=True)
    delivery = WebhookDeliverySerializer(required=False, allow_null=True)


class WebhookInSerializer(serializers.Serializer):
    trackerId = serializers.CharField(required=False, allow_null=True)
    trackingNumber = serializers.CharField()
    shipment = WebhookShipmentSerializer(required=False)
    events = WebhookEventSerializer(many=True, required=False)


# ---------------------------
# 출력용
# ---------------------------
class WebhookResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    updated = serializers.IntegerField(required=False)
    message = serializers.CharField(required=False)


class CheckpointSerializer(serializers.Serializer):
    time = serializers.CharField(allow_null=True)
    message = serializers.CharField(allow_null=True)
    location = serializers.CharField(allow_null=True)
    status = serializers.CharField()
    statusCode = serializers.CharField(allow_null=True)


class TrackingSnapshotSerializer(serializers.Serializer):
    ship24_id = serializers.CharField(allow_null=True)
    tracking_status = serializers.CharField(allow_null=True)
    tracking_substatus = serializers.CharField(allow_null=True)
    tracking_location = serializers.CharField(allow_null=True)
    tracking_eta = serializers.CharField(allow_null=True)
    tracking_updated_at = serializers.DateTimeField(allow_null=True)
    tracking_checkpoints = CheckpointSerializer(many=True, allow_null=True)
    delivered = serializers.BooleanField(required=False)
