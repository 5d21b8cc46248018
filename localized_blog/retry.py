"""
Retry helpers for flaky data access.

    from localized_blog.retry import retry_database_operation

    post = await retry_database_operation(lambda: store.get_by_slug(slug))

The operation is a zero-argument callable returning an awaitable. Every
attempt calls it again, so it must be safe to repeat.
"""
import asyncio
import dataclasses
import enum
import logging

from .conf import blog_settings
from .exceptions import LocalizedBlogError, RetryError

logger = logging.getLogger(__name__)


class BackoffMode(str, enum.Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


def always_retry(exc):
    return True


@dataclasses.dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to run an operation and how long to wait in between.

    ``max_attempts`` counts the first call. ``base_delay`` is in seconds.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff: BackoffMode = BackoffMode.EXPONENTIAL
    is_retryable: object = always_retry

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")
        object.__setattr__(self, "backoff", BackoffMode(self.backoff))

    @classmethod
    def from_settings(cls, **overrides):
        """Build a policy from the LOCALIZED_BLOG retry settings."""
        values = {
            "max_attempts": blog_settings.RETRY_MAX_ATTEMPTS,
            "base_delay": blog_settings.RETRY_BASE_DELAY,
            "backoff": blog_settings.RETRY_BACKOFF,
        }
        values.update(overrides)
        return cls(**values)

    def delay_for(self, attempt):
        """Seconds to wait after the given (1-based) failed attempt."""
        if self.backoff is BackoffMode.LINEAR:
            return self.base_delay * attempt
        return self.base_delay * 2 ** (attempt - 1)


def compute_delay(policy, attempt):
    return policy.delay_for(attempt)


async def with_retry(operation, policy=None, *, sleep=asyncio.sleep):
    """
    Await ``operation()`` until it succeeds or the policy gives up.

    Raises RetryError wrapping the last exception once ``max_attempts`` is
    reached or ``policy.is_retryable`` rejects a failure. A rejected failure
    is never retried, even on the first attempt.
    """
    if policy is None:
        policy = RetryPolicy()

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= policy.max_attempts or not policy.is_retryable(exc):
                raise RetryError(exc, attempt) from exc

            delay = policy.delay_for(attempt)
            logger.warning(
                "Attempt %d/%d failed (%s), retrying in %.2fs",
                attempt,
                policy.max_attempts,
                exc,
                delay,
            )
            await sleep(delay)
            attempt += 1


def is_transient_error(exc):
    """
    Default retry predicate for data access.

    Errors that carry a structured ``kind`` (see DataAccessError) are judged
    by it, other localized_blog errors are permanent. Anything else is matched case-insensitively against
    RETRYABLE_ERROR_KEYWORDS using the message and the exception class name.
    """
    kind = getattr(exc, "kind", None)
    if kind is not None and hasattr(kind, "is_transient"):
        return kind.is_transient
    if isinstance(exc, LocalizedBlogError):
        return False

    haystack = f"{type(exc).__name__} {exc}".lower()
    return any(
        keyword.lower() in haystack
        for keyword in blog_settings.RETRYABLE_ERROR_KEYWORDS
    )


async def retry_database_operation(operation, policy=None, *, sleep=asyncio.sleep):
    """
    Retry a storage call on transient failures only.

    Without an explicit predicate on ``policy``, is_transient_error decides.
    """
    if policy is None:
        policy = RetryPolicy.from_settings(is_retryable=is_transient_error)
    elif policy.is_retryable is always_retry:
        policy = dataclasses.replace(policy, is_retryable=is_transient_error)
    return await with_retry(operation, policy, sleep=sleep)
