# traffic/apps.py
from django.apps import AppConfig


class TrafficAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "traffic"
    verbose_name = "Traffic tracking"
