"""
Shared fixtures for django-localized-blog tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from localized_blog.models import Post, Tag

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_post(db):
    """Factory creating published posts; ``tags`` is a list of tag names."""

    def factory(slug, locale="id", published_at=T0, tags=(), **fields):
        fields.setdefault("title", slug.replace("-", " ").title())
        fields.setdefault("published", True)
        post = Post.objects.create(
            slug=slug,
            locale=locale,
            published_at=published_at,
            **fields,
        )
        for name in tags:
            tag, _ = Tag.objects.get_or_create(name=name)
            post.tags.add(tag)
        return post

    return factory


@pytest.fixture
def timeline(make_post):
    """Three Indonesian posts an hour apart plus an English one in between."""
    return {
        "before": make_post("before", published_at=T0 - timedelta(hours=1)),
        "current": make_post("current", published_at=T0),
        "after": make_post("after", published_at=T0 + timedelta(hours=1)),
        "other_locale": make_post(
            "other-locale",
            locale="en",
            published_at=T0 + timedelta(minutes=30),
        ),
    }
