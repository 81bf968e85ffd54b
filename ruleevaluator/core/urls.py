from django.urls import path

from .health import health_check
from .health import ping

urlpatterns = [
    path("ping", ping, name="ping"),
    path("health/", health_check, name="health"),
]
