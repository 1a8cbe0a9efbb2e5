# traffic/urls.py
from django.urls import path

from . import views

urlpatterns = [
    path("health", views.health),
    path("locations", views.locations),
    path("locations/<str:name>/readings", views.location_readings, name="location_readings"),
]
