from django.urls import path

from modules.core.views import InfoView, StatusView, health_check, liveness_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("health/ready", health_check, name="health_ready"),
    path("health/live", liveness_check, name="health_live"),
    path("api/status/", StatusView.as_view(), name="status"),
    path("api/status/info/", InfoView.as_view(), name="status_info"),
]
