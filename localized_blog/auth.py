"""
Shared-secret admin access.

The admin surface is unlocked by a single key (ACCESS_KEY) stored in the
``admin_access`` cookie. There are no user accounts.
"""
import functools

from django.http import JsonResponse
from django.utils.crypto import constant_time_compare

from .conf import blog_settings


def key_matches(candidate):
    valid_key = blog_settings.ACCESS_KEY
    if not valid_key or not candidate:
        return False
    return constant_time_compare(candidate, valid_key)


def is_admin(request):
    return key_matches(request.COOKIES.get(blog_settings.ADMIN_COOKIE_NAME))


def admin_required(view):
    """Reject requests without a valid admin cookie with a 401 JSON error."""

    @functools.wraps(view)
    async def wrapper(request, *args, **kwargs):
        if not is_admin(request):
            return JsonResponse({"error": "Unauthorized"}, status=401)
        return await view(request, *args, **kwargs)

    return wrapper
