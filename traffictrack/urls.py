# traffictrack/urls.py
from django.urls import include, path

urlpatterns = [
    path("api/", include("traffic.urls")),
]
