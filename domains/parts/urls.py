from django.urls import path

from .views import PartDetailAPI, PartListCreateAPI

app_name = "parts"

urlpatterns = [
    path("", PartListCreateAPI.as_view(), name="part-list"),
    path("<int:pk>/", PartDetailAPI.as_view(), name="part-detail"),
]
