from django.apps import AppConfig


class ZoningConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "zoning"
    verbose_name = "Zone grid"
