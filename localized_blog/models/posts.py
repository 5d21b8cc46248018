"""
Post and Tag models for django-localized-blog.
"""
import uuid

from django.db import models
from django.urls import reverse
from django.utils import timezone
from django.utils.text import slugify

from ..conf import blog_settings, locale_choices


class Tag(models.Model):
    """
    Flat tag for posts.

    Tags are shared across locales and drive similar-post ranking.
    """

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:blog_settings.SLUG_MAX_LENGTH]
        super().save(*args, **kwargs)

    @property
    def post_count(self):
        """Return count of published posts with this tag."""
        return self.posts.filter(published=True).count()


class Post(models.Model):
    """
    Blog post in a single locale.

    Locale variants of one article share a ``content_group_id``. A post
    without one has no translations. Slugs are unique per locale.
    """

    # Content
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, blank=True, db_index=True)
    excerpt = models.TextField(blank=True)
    content = models.TextField(blank=True, help_text="Markdown source")
    cover_image_url = models.URLField(max_length=500, blank=True)

    # Localization
    locale = models.CharField(
        max_length=10,
        choices=locale_choices(),
        default=blog_settings.DEFAULT_LOCALE,
        db_index=True,
    )
    content_group_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Shared by every locale variant of the same article",
    )

    # Status
    published = models.BooleanField(default=False)
    published_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="When post was published; undated posts have no neighbours",
    )

    # Taxonomy
    tags = models.ManyToManyField(Tag, related_name="posts", blank=True)

    # Timestamps
    created_at = models.DateTimeField(db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-published_at", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["slug", "locale"],
                name="localized_blog_post_slug_locale",
            ),
        ]
        indexes = [
            models.Index(fields=["locale", "published", "-published_at"]),
            models.Index(fields=["content_group_id", "locale"]),
        ]

    def __str__(self):
        return f"{self.title} [{self.locale}]"

    def save(self, *args, **kwargs):
        # Auto-generate slug from title, unique within the locale
        if not self.slug and self.title and blog_settings.AUTO_GENERATE_SLUGS:
            base_slug = slugify(self.title)[:blog_settings.SLUG_MAX_LENGTH]
            slug = base_slug
            counter = 1
            while (
                Post.objects.filter(slug=slug, locale=self.locale)
                .exclude(pk=self.pk)
                .exists()
            ):
                slug = f"{base_slug}-{counter}"
                counter += 1
            self.slug = slug

        if not self.created_at:
            self.created_at = timezone.now()

        if self.published and not self.published_at:
            self.published_at = timezone.now()

        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("localized_blog:post_detail", kwargs={"slug": self.slug})

    @property
    def preview(self):
        """Return the excerpt, or a truncated body when there is none."""
        if self.excerpt:
            return self.excerpt
        if len(self.content) > 280:
            return self.content[:280] + "..."
        return self.content

    @property
    def sort_date(self):
        return self.published_at or self.created_at

    @property
    def tag_names(self):
        return [tag.name for tag in self.tags.all()]

    def ensure_content_group(self):
        """Assign a fresh content group if the post has none."""
        if not self.content_group_id:
            self.content_group_id = uuid.uuid4()
            self.save(update_fields=["content_group_id", "updated_at"])
        return self.content_group_id

    def publish(self):
        """Publish the post immediately."""
        self.published = True
        self.published_at = timezone.now()
        self.save(update_fields=["published", "published_at", "updated_at"])

    def unpublish(self):
        self.published = False
        self.save(update_fields=["published", "updated_at"])
