"""
Newsletter subscriber model for django-localized-blog.
"""
from django.db import models
from django.utils import timezone


class Subscriber(models.Model):
    """Email address subscribed to the newsletter."""

    email = models.EmailField(unique=True)
    source = models.CharField(
        max_length=100,
        blank=True,
        help_text="Where the sign-up came from (e.g. footer, post)",
    )
    is_active = models.BooleanField(default=True)
    subscribed_at = models.DateTimeField(default=timezone.now)
    unsubscribed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-subscribed_at"]
        indexes = [
            models.Index(fields=["is_active"]),
        ]

    def __str__(self):
        return self.email

    @classmethod
    def subscribe(cls, email, source=""):
        """
        Subscribe an address.

        Existing active subscribers are left untouched; inactive ones are
        reactivated. Returns (subscriber, created).
        """
        email = email.strip().lower()
        existing = cls.objects.filter(email=email).first()

        if existing:
            if not existing.is_active:
                existing.is_active = True
                existing.unsubscribed_at = None
                existing.save(update_fields=["is_active", "unsubscribed_at"])
            return existing, False

        subscriber = cls.objects.create(email=email, source=source or "")
        return subscriber, True

    def unsubscribe(self):
        self.is_active = False
        self.unsubscribed_at = timezone.now()
        self.save(update_fields=["is_active", "unsubscribed_at"])
