"""
Locale-aware lookups for reader-facing page furniture.

Translations, previous/next navigation and similar posts are optional parts
of a page. A failing lookup is logged and answered with an empty result so
the page still renders.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .conf import blog_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationEntry:
    locale: str
    exists: bool
    slug: Optional[str] = None
    title: Optional[str] = None

    def as_dict(self):
        return {
            "locale": self.locale,
            "exists": self.exists,
            "slug": self.slug,
            "title": self.title,
        }


@dataclass(frozen=True)
class AdjacentPosts:
    older: object = None
    newer: object = None


def _tag_names(post):
    return {tag.name for tag in post.tags.all()}


def _recency(post):
    # Dated posts rank before undated ones
    return (post.published_at is not None, post.published_at or post.created_at)


class LocaleContentResolver:
    """
    Resolve translations, neighbours and similar posts within a locale.

    ``store`` is any object with the PostStore lookup coroutines. ``locales``
    defaults to SUPPORTED_LOCALES.
    """

    def __init__(self, store, locales=None):
        self.store = store
        self._locales = list(locales) if locales is not None else None

    @property
    def locales(self):
        if self._locales is not None:
            return self._locales
        return blog_settings.SUPPORTED_LOCALES

    async def translations(self, content_group_id):
        """
        One TranslationEntry per supported locale for the content group.

        Returns [] when the post has no group or the lookup fails.
        """
        if not content_group_id:
            return []

        try:
            siblings = await self.store.posts_in_group(content_group_id)
        except Exception:
            logger.warning(
                "Translation lookup failed for group %s",
                content_group_id,
                exc_info=True,
            )
            return []

        by_locale = {}
        for post in siblings:
            # Duplicates within a locale: keep the first one
            by_locale.setdefault(post.locale, post)

        entries = []
        for locale in self.locales:
            post = by_locale.get(locale)
            if post is None:
                entries.append(TranslationEntry(locale=locale, exists=False))
            else:
                entries.append(TranslationEntry(
                    locale=locale,
                    exists=True,
                    slug=post.slug,
                    title=post.title,
                ))
        return entries

    async def adjacent(self, published_at, locale):
        """
        Older and newer published neighbours in the same locale.

        Without a reference date there is no older post and the earliest
        dated post counts as newer.
        """
        try:
            older = await self.store.latest_before(published_at, locale)
            newer = await self.store.earliest_after(published_at, locale)
        except Exception:
            logger.warning(
                "Adjacent post lookup failed (locale=%s, published_at=%s)",
                locale,
                published_at,
                exc_info=True,
            )
            return AdjacentPosts()
        return AdjacentPosts(older=older, newer=newer)

    async def similar(self, exclude_slug, tags, limit=None, locale=None):
        """
        Posts of ``locale`` ranked by the number of tags shared with ``tags``.

        Ties go to the most recently published post. Posts sharing no tag
        only fill the slots left over. Without tags the most recent posts
        are returned.
        """
        if limit is None:
            limit = blog_settings.SIMILAR_POSTS_LIMIT
        if locale is None:
            locale = blog_settings.DEFAULT_LOCALE
        if limit <= 0:
            return []

        wanted = {tag for tag in (tags or []) if tag}
        try:
            if not wanted:
                return list(await self.store.recent(locale, exclude_slug, limit))

            scored = []
            for post in await self.store.tagged(locale, exclude_slug, wanted):
                shared = len(_tag_names(post) & wanted)
                if shared:
                    scored.append((shared, _recency(post), post))
            scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
            ranked = [post for _, _, post in scored[:limit]]

            if len(ranked) < limit:
                filler = await self.store.recent(
                    locale,
                    exclude_slug,
                    limit - len(ranked),
                    exclude_ids=[post.pk for post in ranked],
                )
                ranked.extend(filler)
            return ranked
        except Exception:
            logger.warning(
                "Similar post lookup failed for %s (locale=%s)",
                exclude_slug,
                locale,
                exc_info=True,
            )
            return []
