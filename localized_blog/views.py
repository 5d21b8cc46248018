"""
JSON views for django-localized-blog.
"""
import asyncio
import json
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .auth import admin_required, is_admin, key_matches
from .conf import blog_settings, is_supported_locale
from .content import calculate_stats, extract_headings, render_markdown
from .exceptions import InvalidLocale, PostNotFound, RetryError, TranslationExists
from .retry import retry_database_operation
from .services import PostQueries, TranslationService
from .store import PostStore

logger = logging.getLogger(__name__)


def request_locale(request):
    """Locale from the locale cookie, falling back to DEFAULT_LOCALE."""
    locale = request.COOKIES.get(blog_settings.LOCALE_COOKIE_NAME)
    if locale and is_supported_locale(locale):
        return locale
    return blog_settings.DEFAULT_LOCALE


def serialize_post(post, full=False):
    if post is None:
        return None
    data = {
        "id": post.pk,
        "slug": post.slug,
        "title": post.title,
        "excerpt": post.excerpt,
        "locale": post.locale,
        "cover_image_url": post.cover_image_url or None,
        "published_at": post.published_at.isoformat() if post.published_at else None,
    }
    if full:
        data.update({
            "content": post.content,
            "content_group_id": str(post.content_group_id) if post.content_group_id else None,
            "published": post.published,
            "tags": post.tag_names,
            "created_at": post.created_at.isoformat(),
            "updated_at": post.updated_at.isoformat(),
        })
    return data


def _read_json(request):
    try:
        data = json.loads(request.body or b"{}")
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _server_error(message):
    return JsonResponse({"error": message}, status=500)


@require_http_methods(["GET"])
async def post_detail(request, slug):
    """Post with translations, navigation, similar posts and table of contents."""
    store = PostStore()
    queries = PostQueries(store)
    try:
        post = await queries.get_post_by_slug(slug, request.GET.get("locale") or None)
    except RetryError:
        logger.exception("Error fetching post %s", slug)
        return _server_error("Failed to fetch post")

    if post is None:
        return JsonResponse({"error": "Post not found"}, status=404)

    resolver = queries.resolver
    translations, adjacent, similar = await asyncio.gather(
        resolver.translations(post.content_group_id),
        resolver.adjacent(post.published_at, post.locale),
        resolver.similar(post.slug, post.tag_names, locale=post.locale),
    )

    return JsonResponse({
        "post": serialize_post(post, full=True),
        "html": render_markdown(post.content),
        "toc": extract_headings(post.content),
        "stats": calculate_stats(post.content),
        "translations": [entry.as_dict() for entry in translations],
        "navigation": {
            "older": serialize_post(adjacent.older),
            "newer": serialize_post(adjacent.newer),
        },
        "similar": [serialize_post(item) for item in similar],
    })


@require_http_methods(["GET"])
async def post_translations(request, slug):
    """Public list of locale variants for a post."""
    queries = PostQueries()
    try:
        post = await queries.get_post_by_slug(slug)
    except RetryError:
        logger.exception("Error fetching post translations for %s", slug)
        return _server_error("Failed to fetch translations")

    if post is None:
        return JsonResponse({"error": "Post not found"}, status=404)

    translations = await queries.get_post_translations(post.content_group_id)
    response = JsonResponse({
        "post": {
            "slug": post.slug,
            "locale": post.locale,
            "content_group_id": str(post.content_group_id) if post.content_group_id else None,
        },
        "translations": [entry.as_dict() for entry in translations],
    })
    response["Cache-Control"] = "public, s-maxage=60, stale-while-revalidate=300"
    return response


@require_http_methods(["GET"])
async def search(request):
    query = request.GET.get("q", "").strip()
    if not query:
        return JsonResponse({"results": []})

    try:
        posts = await PostQueries().search_posts(query, locale=request_locale(request))
    except RetryError:
        logger.exception("Search failed for %r", query)
        return _server_error("Failed to search posts")

    return JsonResponse({
        "results": [
            {"id": post.pk, "title": post.title, "slug": post.slug, "excerpt": post.excerpt}
            for post in posts
        ],
    })


@require_http_methods(["GET"])
async def popular_posts(request):
    try:
        posts = await PostQueries().get_popular_posts(locale=request_locale(request))
    except RetryError:
        logger.exception("Error fetching popular posts")
        return _server_error("Failed to fetch popular posts")

    return JsonResponse({
        "posts": [
            {"id": post.pk, "title": post.title, "slug": post.slug, "excerpt": post.excerpt}
            for post in posts
        ],
    })


@csrf_exempt
@require_http_methods(["POST"])
async def newsletter_subscribe(request):
    data = _read_json(request)
    if data is None:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    email = data.get("email")
    if not isinstance(email, str):
        return JsonResponse({"error": "Invalid email"}, status=400)
    try:
        validate_email(email.strip())
    except ValidationError:
        return JsonResponse({"error": "Invalid email"}, status=400)

    source = data.get("source") or ""
    try:
        store = PostStore()
        await retry_database_operation(lambda: store.subscribe(email, str(source)[:100]))
    except RetryError:
        logger.exception("Newsletter subscription failed")
        return _server_error("Failed to subscribe")

    return JsonResponse({"ok": True})


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT"])
@admin_required
async def admin_translations(request, slug):
    """
    GET lists the post's translations, POST creates one for ``locale`` and
    PUT links ``targetSlug`` into the post's content group.
    """
    service = TranslationService()

    try:
        if request.method == "GET":
            group_id, posts = await service.list_translations(slug)
            return JsonResponse({
                "content_group_id": str(group_id) if group_id else None,
                "translations": [serialize_post(post) for post in posts],
            })

        data = _read_json(request)
        if data is None:
            return JsonResponse({"error": "Invalid JSON body"}, status=400)

        if request.method == "POST":
            locale = data.get("locale")
            if not locale:
                return JsonResponse({"error": "Locale is required"}, status=400)
            post = await service.create_translation(
                slug,
                locale,
                slug=data.get("slug"),
                title=data.get("title"),
                excerpt=data.get("excerpt"),
                content=data.get("content") or "",
            )
            return JsonResponse(serialize_post(post, full=True), status=201)

        target_slug = data.get("targetSlug")
        if not target_slug:
            return JsonResponse({"error": "Target slug is required"}, status=400)
        source, target = await service.link_translation(slug, target_slug)
        return JsonResponse({
            "content_group_id": str(source.content_group_id),
            "source": serialize_post(source),
            "target": serialize_post(target),
        })

    except PostNotFound as exc:
        return JsonResponse({"error": str(exc)}, status=404)
    except InvalidLocale as exc:
        return JsonResponse({"error": str(exc)}, status=400)
    except TranslationExists as exc:
        return JsonResponse({"error": str(exc), "slug": exc.slug}, status=409)
    except RetryError:
        logger.exception("Error handling translations for %s", slug)
        return _server_error("Failed to process translations")


@csrf_exempt
@require_http_methods(["POST"])
async def auth_verify(request):
    """Set the admin cookie when the submitted key is correct."""
    data = _read_json(request) or {}
    key = data.get("key")
    if not isinstance(key, str) or not key_matches(key):
        return JsonResponse({"error": "Invalid access key"}, status=401)

    response = JsonResponse({"ok": True})
    response.set_cookie(
        blog_settings.ADMIN_COOKIE_NAME,
        key,
        max_age=blog_settings.ADMIN_COOKIE_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=request.is_secure(),
    )
    return response


@require_http_methods(["GET"])
async def auth_check(request):
    return JsonResponse({"authenticated": is_admin(request)})
