"""
Django admin configuration for localized_blog.
"""
from django.contrib import admin

from .models import Post, Subscriber, Tag


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "post_count", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["created_at"]


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = [
        "title_preview",
        "locale",
        "slug",
        "published",
        "published_at",
        "has_translations",
        "created_at",
    ]
    list_filter = ["locale", "published", "published_at", "created_at"]
    search_fields = ["title", "content", "slug", "content_group_id"]
    filter_horizontal = ["tags"]
    date_hierarchy = "created_at"
    readonly_fields = ["created_at", "updated_at"]
    prepopulated_fields = {"slug": ("title",)}

    fieldsets = (
        (None, {
            "fields": ("title", "slug", "excerpt", "content", "cover_image_url")
        }),
        ("Localization", {
            "fields": ("locale", "content_group_id")
        }),
        ("Taxonomy", {
            "fields": ("tags",)
        }),
        ("Publishing", {
            "fields": ("published", "published_at"),
        }),
        ("Metadata", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    actions = ["publish_posts", "unpublish_posts"]

    def title_preview(self, obj):
        """Truncated title for list display."""
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title

    title_preview.short_description = "Title"

    def has_translations(self, obj):
        return bool(obj.content_group_id)

    has_translations.boolean = True
    has_translations.short_description = "Grouped"

    @admin.action(description="Publish selected posts")
    def publish_posts(self, request, queryset):
        for post in queryset:
            post.publish()
        self.message_user(request, f"{queryset.count()} posts published.")

    @admin.action(description="Unpublish selected posts")
    def unpublish_posts(self, request, queryset):
        for post in queryset:
            post.unpublish()
        self.message_user(request, f"{queryset.count()} posts unpublished.")


@admin.register(Subscriber)
class SubscriberAdmin(admin.ModelAdmin):
    list_display = ["email", "source", "is_active", "subscribed_at", "unsubscribed_at"]
    list_filter = ["is_active", "source", "subscribed_at"]
    search_fields = ["email"]
    readonly_fields = ["subscribed_at", "unsubscribed_at"]
    actions = ["unsubscribe"]

    @admin.action(description="Unsubscribe selected addresses")
    def unsubscribe(self, request, queryset):
        count = 0
        for subscriber in queryset.filter(is_active=True):
            subscriber.unsubscribe()
            count += 1
        self.message_user(request, f"{count} subscribers unsubscribed.")
