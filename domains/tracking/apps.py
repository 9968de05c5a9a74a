from django.apps import AppConfig


class TrackingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "domains.tracking"  # 모델 없음: 규칙/웹훅/어댑터/태스크만
    label = "tracking"
