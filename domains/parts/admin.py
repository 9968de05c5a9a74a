from __future__ import annotations

import json

from django.contrib import admin, messages
from django.utils.html import format_html

from domains.tracking.carriers import classify
from domains.tracking.exceptions import TrackingProviderError
from domains.tracking.services import sync_part_tracking

from . import models


# ---------- Part Admin ----------
@admin.register(models.Part)
class PartAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "part",
        "user_display",
        "tracking",
        "carrier_display",
        "tracking_status",
        "shipped",
        "delivered",
        "tracking_updated_at",
    )

    readonly_fields = (
        "ship24_id",
        "tracking_status",
        "tracking_substatus",
        "tracking_location",
        "tracking_eta",
        "tracking_updated_at",
        "checkpoints_display",
        "tracking_link",
        "created_at",
        "updated_at",
    )
    exclude = ("tracking_checkpoints",)

    search_fields = ("part", "tracking", "ship24_id")
    ordering = ("-id",)
    actions = ["refresh_tracking"]

    class CarrierFilter(admin.SimpleListFilter):
        title = "Carrier"
        parameter_name = "carrier"

        def lookups(self, request, model_admin):
            return [(n, n) for n in ("Amazon", "Orange Connex", "ECMS", "UPS", "FedEx", "USPS", "DHL", "Local")]

        def queryset(self, request, queryset):
            # 택배사는 저장하지 않으므로 파이썬에서 분류 후 id 로 거른다
            if not self.value():
                return queryset
            ids = [
                pk
                for pk, tracking in queryset.values_list("id", "tracking")
                if classify(tracking).carrier_name == self.value()
            ]
            return queryset.filter(id__in=ids)

    list_filter = (CarrierFilter, "tracking_status", "shipped", "delivered")

    # ----- list_display / readonly_fields용 콜러블 -----
    def user_display(self, obj):
        u = obj.user
        if not u:
            return "-"
        return getattr(u, "email", None) or getattr(u, "username", None) or str(u)
    user_display.short_description = "User"

    def carrier_display(self, obj):
        return classify(obj.tracking).carrier_name or "-"
    carrier_display.short_description = "Carrier"

    def tracking_link(self, obj):
        match = classify(obj.tracking)
        if not match.tracking_url:
            return obj.tracking or "-"
        return format_html(
            "<a href='{}' target='_blank' rel='noopener'>{}</a>",
            match.tracking_url,
            match.carrier_name or obj.tracking,
        )
    tracking_link.short_description = "Tracking link"

    def checkpoints_display(self, obj):
        if not obj.tracking_checkpoints:
            return "-"
        return format_html(
            "<pre style='white-space:pre-wrap'>{}</pre>",
            json.dumps(obj.tracking_checkpoints, ensure_ascii=False, indent=2),
        )
    checkpoints_display.short_description = "Checkpoints"

    # ----- actions -----
    @admin.action(description="Refresh tracking from Ship24")
    def refresh_tracking(self, request, queryset):
        refreshed = 0
        for part in queryset:
            try:
                if sync_part_tracking(part) is not None:
                    refreshed += 1
            except TrackingProviderError as e:
                self.message_user(request, f"{part}: {e}", level=messages.WARNING)
        self.message_user(request, f"{refreshed} part(s) refreshed.")
