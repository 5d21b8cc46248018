"""Django app configuration for localized_blog."""
from django.apps import AppConfig


class LocalizedBlogConfig(AppConfig):
    """Configuration for the localized blog app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "localized_blog"
    verbose_name = "Localized Blog"
