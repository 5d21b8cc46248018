"""
Exceptions raised by django-localized-blog.

Data access failures carry a structured ``kind`` so retry decisions do not
depend on the wording of a driver's error message.
"""
import enum


class LocalizedBlogError(Exception):
    """Base class for all localized_blog errors."""


class ErrorKind(str, enum.Enum):
    """Classification of a data access failure."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    TEMPORARY = "temporary"
    PERMANENT = "permanent"

    @property
    def is_transient(self):
        return self is not ErrorKind.PERMANENT


class DataAccessError(LocalizedBlogError):
    """A storage call failed."""

    def __init__(self, message, kind=ErrorKind.PERMANENT):
        super().__init__(message)
        self.kind = ErrorKind(kind)


class RetryError(LocalizedBlogError):
    """
    Raised when a retried operation gives up.

    ``last_error`` is the terminal underlying exception and ``attempts`` the
    number of invocations made.
    """

    def __init__(self, last_error, attempts, message=None):
        if message is None:
            message = f"Operation failed after {attempts} attempts: {last_error}"
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


class PostNotFound(LocalizedBlogError):
    """No post matches the requested slug."""


class InvalidLocale(LocalizedBlogError):
    """The locale is not one of the supported locales."""


class TranslationExists(LocalizedBlogError):
    """The content group already has a post in the target locale."""

    def __init__(self, message, slug=None):
        super().__init__(message)
        self.slug = slug
