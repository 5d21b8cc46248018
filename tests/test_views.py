"""
Tests for django-localized-blog views.
"""
import json
import uuid
from datetime import timedelta
from unittest import mock

import pytest
from django.urls import reverse

from localized_blog.exceptions import DataAccessError, ErrorKind
from localized_blog.models import Post, Subscriber
from localized_blog.store import PostStore

from .conftest import T0

ACCESS_KEY = "test-access-key"


@pytest.fixture
def admin_client(client):
    client.cookies["admin_access"] = ACCESS_KEY
    return client


def post_json(client, url, data, method="post"):
    return getattr(client, method)(url, data=json.dumps(data), content_type="application/json")


class TestPostDetail:
    """Tests for the post detail payload."""

    def test_full_payload(self, client, timeline, make_post):
        group = uuid.uuid4()
        Post.objects.filter(pk=timeline["current"].pk).update(
            content_group_id=group,
            content="# Title\n\n## Section\n\nBody text",
        )
        make_post("current-en", locale="en", content_group_id=group)

        response = client.get(reverse("localized_blog:post_detail", args=["current"]))

        assert response.status_code == 200
        data = response.json()
        assert data["post"]["slug"] == "current"
        assert data["post"]["content_group_id"] == str(group)
        assert data["navigation"]["older"]["slug"] == "before"
        assert data["navigation"]["newer"]["slug"] == "after"
        assert [item["text"] for item in data["toc"]] == ["Title", "Section"]
        assert data["translations"] == [
            {"locale": "en", "exists": True, "slug": "current-en", "title": "Current En"},
            {"locale": "id", "exists": True, "slug": "current", "title": "Current"},
        ]
        assert [item["slug"] for item in data["similar"]] == ["after", "before"]
        assert "<h1" in data["html"]

    def test_unknown_post(self, client, db):
        response = client.get(reverse("localized_blog:post_detail", args=["missing"]))
        assert response.status_code == 404

    def test_draft_hidden(self, client, make_post):
        make_post("draft", published=False, published_at=None)
        response = client.get(reverse("localized_blog:post_detail", args=["draft"]))
        assert response.status_code == 404

    def test_resolver_failure_does_not_break_page(self, client, timeline):
        failing = mock.AsyncMock(side_effect=DataAccessError("down", ErrorKind.CONNECTION))
        with mock.patch.object(PostStore, "latest_before", failing), \
                mock.patch.object(PostStore, "earliest_after", failing):
            response = client.get(reverse("localized_blog:post_detail", args=["current"]))

        assert response.status_code == 200
        assert response.json()["navigation"] == {"older": None, "newer": None}

    def test_storage_failure_is_500(self, client, db):
        failing = mock.AsyncMock(side_effect=DataAccessError("down", ErrorKind.CONNECTION))
        with mock.patch.object(PostStore, "get_by_slug", failing):
            response = client.get(reverse("localized_blog:post_detail", args=["current"]))

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch post"}
        assert failing.await_count == 3


class TestPostTranslations:
    """Tests for the public translations endpoint."""

    def test_translations(self, client, make_post):
        group = uuid.uuid4()
        make_post("halo", locale="id", content_group_id=group)

        response = client.get(reverse("localized_blog:post_translations", args=["halo"]))

        assert response.status_code == 200
        data = response.json()
        assert data["post"] == {"slug": "halo", "locale": "id", "content_group_id": str(group)}
        assert data["translations"][0] == {"locale": "en", "exists": False, "slug": None, "title": None}
        assert "s-maxage=60" in response["Cache-Control"]

    def test_no_group(self, client, make_post):
        make_post("solo")
        response = client.get(reverse("localized_blog:post_translations", args=["solo"]))
        assert response.json()["translations"] == []

    def test_unknown_post(self, client, db):
        response = client.get(reverse("localized_blog:post_translations", args=["missing"]))
        assert response.status_code == 404


class TestSearchAndPopular:
    """Tests for search and popular posts."""

    def test_empty_query(self, client, db):
        response = client.get(reverse("localized_blog:search"), {"q": "  "})
        assert response.json() == {"results": []}

    def test_search_uses_locale_cookie(self, client, make_post):
        make_post("id-post", title="Belajar Django", locale="id")
        make_post("en-post", title="Learning Django", locale="en")

        client.cookies["NEXT_LOCALE"] = "en"
        response = client.get(reverse("localized_blog:search"), {"q": "django"})

        assert [item["slug"] for item in response.json()["results"]] == ["en-post"]

    def test_unsupported_cookie_falls_back(self, client, make_post):
        make_post("id-post", title="Belajar Django", locale="id")

        client.cookies["NEXT_LOCALE"] = "fr"
        response = client.get(reverse("localized_blog:search"), {"q": "django"})

        assert [item["slug"] for item in response.json()["results"]] == ["id-post"]

    def test_popular(self, client, make_post):
        make_post("older", published_at=T0 - timedelta(days=1))
        make_post("newer", published_at=T0)

        response = client.get(reverse("localized_blog:popular_posts"))

        assert [item["slug"] for item in response.json()["posts"]] == ["newer", "older"]


class TestNewsletter:
    """Tests for newsletter sign-up."""

    def test_subscribe(self, client, db):
        response = post_json(client, reverse("localized_blog:newsletter"), {
            "email": "reader@example.com",
            "source": "footer",
        })

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert Subscriber.objects.get().source == "footer"

    def test_duplicate_is_ok(self, client, db):
        url = reverse("localized_blog:newsletter")
        post_json(client, url, {"email": "reader@example.com"})
        response = post_json(client, url, {"email": "reader@example.com"})

        assert response.status_code == 200
        assert Subscriber.objects.count() == 1

    @pytest.mark.parametrize("payload", [{}, {"email": 42}, {"email": "not-an-email"}])
    def test_invalid_email(self, client, db, payload):
        response = post_json(client, reverse("localized_blog:newsletter"), payload)
        assert response.status_code == 400

    def test_get_not_allowed(self, client, db):
        response = client.get(reverse("localized_blog:newsletter"))
        assert response.status_code == 405


class TestAdminTranslations:
    """Tests for the admin translations endpoint."""

    def test_requires_admin_cookie(self, client, make_post):
        make_post("halo")
        response = client.get(reverse("localized_blog:admin_translations", args=["halo"]))
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_wrong_key(self, client, make_post):
        make_post("halo")
        client.cookies["admin_access"] = "guess"
        response = client.get(reverse("localized_blog:admin_translations", args=["halo"]))
        assert response.status_code == 401

    def test_list_without_group(self, admin_client, make_post):
        make_post("halo")
        response = admin_client.get(reverse("localized_blog:admin_translations", args=["halo"]))
        assert response.json() == {"content_group_id": None, "translations": []}

    def test_create(self, admin_client, make_post):
        make_post("halo", title="Halo")
        url = reverse("localized_blog:admin_translations", args=["halo"])

        response = post_json(admin_client, url, {"locale": "en", "title": "Hello"})

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "halo-en"
        assert data["title"] == "Hello"
        assert data["published"] is False

        conflict = post_json(admin_client, url, {"locale": "en"})
        assert conflict.status_code == 409
        assert conflict.json()["slug"] == "halo-en"

    def test_create_invalid_locale(self, admin_client, make_post):
        make_post("halo")
        url = reverse("localized_blog:admin_translations", args=["halo"])
        assert post_json(admin_client, url, {"locale": "fr"}).status_code == 400
        assert post_json(admin_client, url, {}).status_code == 400

    def test_create_missing_source(self, admin_client, db):
        url = reverse("localized_blog:admin_translations", args=["missing"])
        assert post_json(admin_client, url, {"locale": "en"}).status_code == 404

    def test_link(self, admin_client, make_post):
        make_post("halo", locale="id")
        make_post("hello", locale="en")
        url = reverse("localized_blog:admin_translations", args=["halo"])

        response = post_json(admin_client, url, {"targetSlug": "hello"}, method="put")

        assert response.status_code == 200
        group = response.json()["content_group_id"]
        assert str(Post.objects.get(slug="hello").content_group_id) == group

    def test_link_requires_target(self, admin_client, make_post):
        make_post("halo")
        url = reverse("localized_blog:admin_translations", args=["halo"])
        assert post_json(admin_client, url, {}, method="put").status_code == 400


class TestAuth:
    """Tests for shared-secret admin auth."""

    def test_verify_sets_cookie(self, client, db):
        response = post_json(client, reverse("localized_blog:auth_verify"), {"key": ACCESS_KEY})

        assert response.status_code == 200
        assert response.cookies["admin_access"].value == ACCESS_KEY
        assert response.cookies["admin_access"]["httponly"]

    def test_verify_rejects_wrong_key(self, client, db):
        response = post_json(client, reverse("localized_blog:auth_verify"), {"key": "nope"})
        assert response.status_code == 401

    def test_check(self, client, db):
        url = reverse("localized_blog:auth_check")
        assert client.get(url).json() == {"authenticated": False}

        client.cookies["admin_access"] = ACCESS_KEY
        assert client.get(url).json() == {"authenticated": True}

    def test_no_key_configured_denies(self, client, db, settings):
        settings.LOCALIZED_BLOG = {}
        client.cookies["admin_access"] = ""
        assert client.get(reverse("localized_blog:auth_check")).json() == {"authenticated": False}
