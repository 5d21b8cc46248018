"""
Configuration settings for django-localized-blog.

Override these in your Django settings.py:

    LOCALIZED_BLOG = {
        'SUPPORTED_LOCALES': ['en', 'id'],
        'DEFAULT_LOCALE': 'id',
        'ACCESS_KEY': os.environ.get('ACCESS_KEY'),
        'RETRY_MAX_ATTEMPTS': 3,
        ...
    }
"""
from django.conf import settings

DEFAULTS = {
    # Locales
    "SUPPORTED_LOCALES": [
        ("en", "English"),
        ("id", "Bahasa Indonesia"),
    ],
    "DEFAULT_LOCALE": "id",
    "LOCALE_COOKIE_NAME": "NEXT_LOCALE",

    # Admin access (single shared secret stored in a cookie)
    "ACCESS_KEY": None,
    "ADMIN_COOKIE_NAME": "admin_access",
    "ADMIN_COOKIE_MAX_AGE": 60 * 60 * 24 * 7,

    # Show drafts to readers (development mode)
    "INCLUDE_DRAFTS": False,

    # Retry behaviour for data access
    "RETRY_MAX_ATTEMPTS": 3,
    "RETRY_BASE_DELAY": 1.0,  # seconds
    "RETRY_BACKOFF": "exponential",
    "RETRYABLE_ERROR_KEYWORDS": [
        "NetworkError",
        "TimeoutError",
        "ConnectionError",
        "TemporaryError",
        "ECONNRESET",
        "ENOTFOUND",
        "ETIMEDOUT",
    ],

    # Reader-facing listings
    "SIMILAR_POSTS_LIMIT": 4,
    "POPULAR_POSTS_LIMIT": 6,
    "SEARCH_RESULTS_LIMIT": 20,

    # Content
    "WORDS_PER_MINUTE": 200,
    "TOC_MAX_DEPTH": 3,

    # SEO
    "AUTO_GENERATE_SLUGS": True,
    "SLUG_MAX_LENGTH": 100,
}


class LocalizedBlogSettings:
    """
    Lazy settings object that reads from Django settings.

    Access via: from localized_blog.conf import blog_settings
    """

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid localized_blog setting: {name}")

        user_settings = getattr(settings, "LOCALIZED_BLOG", {})
        return user_settings.get(name, DEFAULTS[name])

    @property
    def SUPPORTED_LOCALES(self):
        """Return supported locale codes in configured order."""
        user_settings = getattr(settings, "LOCALIZED_BLOG", {})
        locales = user_settings.get("SUPPORTED_LOCALES", DEFAULTS["SUPPORTED_LOCALES"])
        return [item[0] if isinstance(item, (list, tuple)) else item for item in locales]


blog_settings = LocalizedBlogSettings()


def locale_choices():
    """
    Return model field choices for the supported locales.

    Entries configured as bare codes use the upper-cased code as label.
    """
    user_settings = getattr(settings, "LOCALIZED_BLOG", {})
    locales = user_settings.get("SUPPORTED_LOCALES", DEFAULTS["SUPPORTED_LOCALES"])
    choices = []
    for item in locales:
        if isinstance(item, (list, tuple)):
            choices.append((item[0], item[1]))
        else:
            choices.append((item, item.upper()))
    return choices


def is_supported_locale(locale):
    return locale in blog_settings.SUPPORTED_LOCALES
