"""
Post queries and translation authoring.

Every storage call goes through retry_database_operation, so transient
database failures are retried and everything else surfaces as RetryError.
"""
import logging

from .conf import blog_settings, is_supported_locale
from .exceptions import InvalidLocale, PostNotFound, RetryError, TranslationExists
from .models import Post
from .resolver import LocaleContentResolver
from .retry import retry_database_operation
from .store import PostStore

logger = logging.getLogger(__name__)


def _require_locale(locale):
    if not is_supported_locale(locale):
        supported = ", ".join(blog_settings.SUPPORTED_LOCALES)
        raise InvalidLocale(f"Invalid locale {locale!r}. Must be one of: {supported}")


class PostQueries:
    """
    Read-side post queries for views.

    Drafts are hidden unless INCLUDE_DRAFTS is set.
    """

    def __init__(self, store=None, retry_policy=None):
        self.store = store or PostStore()
        self.retry_policy = retry_policy
        self.resolver = LocaleContentResolver(self.store)

    @property
    def include_drafts(self):
        return blog_settings.INCLUDE_DRAFTS

    async def _retry(self, operation):
        return await retry_database_operation(operation, self.retry_policy)

    async def get_post_by_slug(self, slug, locale=None):
        post = await self._retry(lambda: self.store.get_by_slug(slug, locale))
        if post is None:
            return None
        if not post.published and not self.include_drafts:
            return None
        return post

    async def get_post_translations(self, content_group_id):
        if not content_group_id:
            return []
        return await self.resolver.translations(content_group_id)

    async def get_post_with_translations(self, slug):
        """Return ``(post, translations)`` or None when the post is hidden."""
        post = await self.get_post_by_slug(slug)
        if post is None:
            return None
        translations = await self.get_post_translations(post.content_group_id)
        return post, translations

    async def get_published_posts(self, locale=None, tag=None, limit=None, offset=0,
                                  exclude_ids=()):
        return await self._retry(lambda: self.store.published(
            locale=locale,
            tag=tag,
            limit=limit,
            offset=offset,
            include_drafts=self.include_drafts,
            exclude_ids=exclude_ids,
        ))

    async def get_posts_by_tag(self, tag, limit=20, locale=None):
        return await self.get_published_posts(locale=locale, tag=tag, limit=limit)

    async def get_recent_posts(self, limit=10, exclude_ids=(), locale=None):
        return await self.get_published_posts(locale=locale, limit=limit, exclude_ids=exclude_ids)

    async def get_popular_posts(self, locale=None, limit=None):
        # Most recent published posts stand in for popularity
        if limit is None:
            limit = blog_settings.POPULAR_POSTS_LIMIT
        return await self.get_published_posts(locale=locale, limit=limit)

    async def search_posts(self, query, locale=None, limit=None):
        if limit is None:
            limit = blog_settings.SEARCH_RESULTS_LIMIT
        return await self._retry(lambda: self.store.search(
            query,
            locale=locale or blog_settings.DEFAULT_LOCALE,
            limit=limit,
            include_drafts=self.include_drafts,
        ))

    async def get_tags(self):
        return await self._retry(self.store.all_tags)


class TranslationService:
    """Admin-side creation and linking of locale variants."""

    def __init__(self, store=None, retry_policy=None):
        self.store = store or PostStore()
        self.retry_policy = retry_policy

    async def _atomic(self, func, *args, **kwargs):
        try:
            return await retry_database_operation(
                lambda: self.store.run_atomic(func, *args, **kwargs),
                self.retry_policy,
            )
        except RetryError as exc:
            # Authoring rule violations are never retried; surface them as-is
            if isinstance(exc.last_error, (PostNotFound, InvalidLocale, TranslationExists)):
                raise exc.last_error
            raise

    async def list_translations(self, slug):
        """Return ``(content_group_id, [posts])`` for the post's group."""
        return await self._atomic(self._list_translations, slug)

    async def create_translation(self, source_slug, target_locale, **fields):
        _require_locale(target_locale)
        return await self._atomic(self._create_translation, source_slug, target_locale, **fields)

    async def link_translation(self, source_slug, target_slug):
        return await self._atomic(self._link_translation, source_slug, target_slug)

    @staticmethod
    def _get_source(slug):
        post = Post.objects.filter(slug=slug).order_by("id").first()
        if post is None:
            raise PostNotFound(f"Post not found: {slug}")
        return post

    def _list_translations(self, slug):
        post = self._get_source(slug)
        if not post.content_group_id:
            return None, []
        siblings = list(
            Post.objects.filter(content_group_id=post.content_group_id).order_by("locale", "id")
        )
        return post.content_group_id, siblings

    def _create_translation(self, source_slug, target_locale, slug=None, title=None,
                            excerpt=None, content=""):
        source = self._get_source(source_slug)
        group_id = source.ensure_content_group()

        existing = Post.objects.filter(
            content_group_id=group_id,
            locale=target_locale,
        ).order_by("id").first()
        if existing is not None:
            raise TranslationExists("Translation already exists", slug=existing.slug)

        translation = Post.objects.create(
            slug=slug or f"{source.slug}-{target_locale}",
            title=title or f"[{target_locale.upper()}] {source.title}",
            excerpt=excerpt or source.excerpt,
            content=content or "",
            cover_image_url=source.cover_image_url,
            locale=target_locale,
            content_group_id=group_id,
            published=False,
        )
        translation.tags.set(source.tags.all())
        logger.info(
            "Created %s translation %s of %s",
            target_locale,
            translation.slug,
            source.slug,
        )
        return Post.objects.prefetch_related("tags").get(pk=translation.pk)

    def _link_translation(self, source_slug, target_slug):
        source = self._get_source(source_slug)
        target = self._get_source(target_slug)

        if source.pk == target.pk:
            raise InvalidLocale("A post cannot be linked to itself")
        if source.locale == target.locale:
            raise InvalidLocale("Posts must have different locales to be linked")

        group_id = source.ensure_content_group()
        occupied = (
            Post.objects.filter(content_group_id=group_id, locale=target.locale)
            .exclude(pk=target.pk)
            .first()
        )
        if occupied is not None:
            raise TranslationExists("Translation already exists", slug=occupied.slug)

        target.content_group_id = group_id
        target.save(update_fields=["content_group_id", "updated_at"])
        logger.info("Linked %s to content group %s", target.slug, group_id)
        return source, target
