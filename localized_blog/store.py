"""
Async query interface over the Post model.

PostStore is the only place that talks to the ORM. Every method runs the
query in Django's sync thread via sync_to_async, returns fully evaluated
results (tags prefetched), and re-raises database failures as
DataAccessError with a structured kind so retry decisions can use it.
"""
import functools

from asgiref.sync import sync_to_async
from django.db import DatabaseError, InterfaceError, OperationalError, transaction
from django.db.models import Q
from django.db.models.functions import Coalesce

from .exceptions import DataAccessError, ErrorKind
from .models import Post, Subscriber, Tag


def classify_database_error(exc):
    """Map a django.db exception to an ErrorKind."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        message = str(exc).lower()
        if "timeout" in message or "timed out" in message:
            return ErrorKind.TIMEOUT
        return ErrorKind.CONNECTION
    return ErrorKind.PERMANENT


def translate_database_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            raise DataAccessError(str(exc), classify_database_error(exc)) from exc

    return wrapper


def _newest_first(qs):
    # Undated posts sort by creation time
    return qs.order_by(Coalesce("published_at", "created_at").desc(), "-id")


class PostStore:
    """
    Post queries used by the resolver and the query services.

    Pass an instance explicitly; tests substitute their own.
    """

    def __init__(self, using=None):
        self.using = using

    def _posts(self):
        qs = Post.objects.all()
        if self.using:
            qs = qs.using(self.using)
        return qs.prefetch_related("tags")

    async def _run(self, func, *args, **kwargs):
        return await sync_to_async(translate_database_errors(func))(*args, **kwargs)

    async def run_atomic(self, func, *args, **kwargs):
        """Run ``func`` inside a transaction in the sync thread."""

        def atomic_call():
            with transaction.atomic(using=self.using):
                return func(*args, **kwargs)

        return await self._run(atomic_call)

    # Lookups

    async def get_by_slug(self, slug, locale=None):
        def query():
            qs = self._posts().filter(slug=slug)
            if locale:
                qs = qs.filter(locale=locale)
            return qs.order_by("id").first()

        return await self._run(query)

    async def posts_in_group(self, content_group_id):
        def query():
            return list(
                self._posts().filter(content_group_id=content_group_id).order_by("id")
            )

        return await self._run(query)

    async def latest_before(self, published_at, locale):
        """Most recent published post of ``locale`` dated before ``published_at``."""
        if published_at is None:
            return None

        def query():
            return (
                self._posts()
                .filter(
                    published=True,
                    locale=locale,
                    published_at__isnull=False,
                    published_at__lt=published_at,
                )
                .order_by("-published_at", "-id")
                .first()
            )

        return await self._run(query)

    async def earliest_after(self, published_at, locale):
        """Least recent published post of ``locale`` dated after ``published_at``."""

        def query():
            qs = self._posts().filter(
                published=True,
                locale=locale,
                published_at__isnull=False,
            )
            if published_at is not None:
                qs = qs.filter(published_at__gt=published_at)
            return qs.order_by("published_at", "id").first()

        return await self._run(query)

    async def tagged(self, locale, exclude_slug, tags):
        """Published posts of ``locale`` sharing at least one of ``tags``."""

        def query():
            qs = (
                self._posts()
                .filter(published=True, locale=locale, tags__name__in=list(tags))
                .exclude(slug=exclude_slug)
                .distinct()
            )
            return list(_newest_first(qs))

        return await self._run(query)

    async def recent(self, locale, exclude_slug=None, limit=None, exclude_ids=()):
        def query():
            qs = self._posts().filter(published=True, locale=locale)
            if exclude_slug:
                qs = qs.exclude(slug=exclude_slug)
            if exclude_ids:
                qs = qs.exclude(pk__in=list(exclude_ids))
            qs = _newest_first(qs)
            if limit is not None:
                qs = qs[:limit]
            return list(qs)

        return await self._run(query)

    # Listings

    async def published(self, locale=None, tag=None, limit=None, offset=0,
                        include_drafts=False, exclude_ids=()):
        def query():
            qs = self._posts()
            if exclude_ids:
                qs = qs.exclude(pk__in=list(exclude_ids))
            if not include_drafts:
                qs = qs.filter(published=True)
            if locale:
                qs = qs.filter(locale=locale)
            if tag:
                qs = qs.filter(tags__name=tag)
            qs = _newest_first(qs)
            if limit is not None:
                return list(qs[offset:offset + limit])
            return list(qs[offset:])

        return await self._run(query)

    async def search(self, query_text, locale=None, limit=20, include_drafts=False):
        def query():
            qs = self._posts().filter(
                Q(title__icontains=query_text)
                | Q(content__icontains=query_text)
                | Q(excerpt__icontains=query_text)
            )
            if not include_drafts:
                qs = qs.filter(published=True)
            if locale:
                qs = qs.filter(locale=locale)
            return list(_newest_first(qs)[:limit])

        return await self._run(query)

    async def all_tags(self):
        """Names of tags used by at least one published post."""

        def query():
            qs = Tag.objects.filter(posts__published=True)
            if self.using:
                qs = qs.using(self.using)
            return list(qs.values_list("name", flat=True).distinct().order_by("name"))

        return await self._run(query)

    # Newsletter

    async def subscribe(self, email, source=""):
        return await self._run(Subscriber.subscribe, email, source)
