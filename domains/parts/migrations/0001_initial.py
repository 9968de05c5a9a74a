import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Part",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("part", models.CharField(max_length=200)),
                ("tracking", models.CharField(blank=True, default="", max_length=255)),
                ("shipped", models.BooleanField(default=False)),
                ("delivered", models.BooleanField(default=False)),
                ("ship24_id", models.CharField(blank=True, max_length=64, null=True)),
                (
                    "tracking_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Pending", "Pending"),
                            ("InfoReceived", "Label Created"),
                            ("InTransit", "In Transit"),
                            ("OutForDelivery", "Out for Delivery"),
                            ("AttemptFail", "Delivery Failed"),
                            ("Delivered", "Delivered"),
                            ("AvailableForPickup", "Ready for Pickup"),
                            ("Exception", "Exception"),
                            ("Expired", "Expired"),
                        ],
                        max_length=24,
                        null=True,
                    ),
                ),
                ("tracking_substatus", models.CharField(blank=True, max_length=64, null=True)),
                ("tracking_location", models.CharField(blank=True, max_length=120, null=True)),
                ("tracking_eta", models.CharField(blank=True, max_length=40, null=True)),
                ("tracking_updated_at", models.DateTimeField(blank=True, null=True)),
                ("tracking_checkpoints", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="parts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at",),
                "indexes": [
                    models.Index(fields=["tracking"], name="parts_part_trackin_5b1c2e_idx"),
                    models.Index(fields=["shipped", "delivered"], name="parts_part_shipped_9d0a41_idx"),
                ],
            },
        ),
    ]
