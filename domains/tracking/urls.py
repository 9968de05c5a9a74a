from django.urls import path, re_path

from .views import PartTrackingAPI, RefreshTrackingsAPI, TrackingWebhookAPI

app_name = "tracking"

urlpatterns = [
    # 웹훅: 제공자 쪽 설정에 슬래시가 없을 수 있어 둘 다 허용 (POST 는 리다이렉트 불가)
    re_path(r"^webhook/?$", TrackingWebhookAPI.as_view(), name="tracking-webhook"),
    path("parts/<int:pk>/", PartTrackingAPI.as_view(), name="part-tracking"),
    path("refresh/", RefreshTrackingsAPI.as_view(), name="tracking-refresh"),
]
