"""
Models for django-localized-blog.

All models are importable from localized_blog.models:

    from localized_blog.models import Post, Tag, Subscriber
"""
from .posts import Tag, Post
from .newsletter import Subscriber

__all__ = [
    "Tag",
    "Post",
    "Subscriber",
]
