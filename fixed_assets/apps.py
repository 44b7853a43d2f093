# fixed_assets/apps.py

from django.apps import AppConfig


class FixedAssetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "fixed_assets"
    verbose_name = "Fixed Assets & Depreciation"
