"""
django-localized-blog - A multi-locale Django blog engine.

Features:
- Posts stored per locale, grouped into translations by a content group id
- Previous/next navigation and similar posts resolved within a locale
- Retry with linear or exponential backoff around database access
- Markdown rendering with table of contents and reading stats
- Newsletter sign-up
- Shared-secret admin access for translation authoring
"""

__version__ = "0.1.0"
__author__ = "Nestor Wheelock"
