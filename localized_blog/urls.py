"""
URL configuration for django-localized-blog.

Include in your project urls.py:

    path('api/', include('localized_blog.urls')),
"""
from django.urls import path

from . import views

app_name = "localized_blog"

urlpatterns = [
    # Reader-facing
    path("posts/popular/", views.popular_posts, name="popular_posts"),
    path("posts/<slug:slug>/", views.post_detail, name="post_detail"),
    path("posts/<slug:slug>/translations/", views.post_translations, name="post_translations"),
    path("search/", views.search, name="search"),
    path("newsletter/", views.newsletter_subscribe, name="newsletter"),

    # Admin
    path(
        "admin/posts/<slug:slug>/translations/",
        views.admin_translations,
        name="admin_translations",
    ),
    path("auth/verify/", views.auth_verify, name="auth_verify"),
    path("auth/check/", views.auth_check, name="auth_check"),
]
