"""Exception types for hncli errors.

Scraper assumption violations describe pages that no longer look the way the
extractors expect. Transient exceptions describe transport failures. Cache
and not-found exceptions are user-facing conditions raised by lookups.
"""

from typing import Any


class ScraperAssumptionException(Exception):
    """Base class for scraper assumption violations.

    The extractors make assumptions about Hacker News markup. When these
    assumptions are violated they raise clear, contextual exceptions that
    help diagnose the issue.
    """

    def __init__(
        self,
        message: str,
        request_url: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the assumption violation.
            request_url: The URL of the page that triggered this error.
            context: Optional dict of additional context (selector, counts, etc).
        """
        self.message = message
        self.request_url = request_url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        parts.append(f"URL: {self.request_url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class HTMLStructuralAssumptionException(ScraperAssumptionException):
    """Raised when HTML structure doesn't match expectations.

    Raised when a named selector returns a different number of elements than
    expected. This usually means the site's markup has changed.

    Attributes:
        selector: Name of the registered selector that was used.
        description: What was being selected.
        actual_count: Number of elements found.
    """

    def __init__(
        self,
        selector: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        request_url: str,
        message: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            selector: Name of the registered selector that was used.
            description: Human-readable description of what was being selected.
            expected_min: Minimum number of elements expected.
            expected_max: Maximum number of elements expected (None = unlimited).
            actual_count: Actual number of elements found.
            request_url: The URL of the page that triggered this error.
            message: Optional replacement for the generated message.
        """
        self.selector = selector
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count

        if expected_max is None:
            expected_str = f"at least {expected_min}"
        elif expected_min == expected_max:
            expected_str = f"exactly {expected_min}"
        else:
            expected_str = f"between {expected_min} and {expected_max}"

        if message is None:
            message = (
                f"HTML structure mismatch: Expected {expected_str} "
                f"elements for '{description}', but found {actual_count}"
            )

        context = {
            "selector": selector,
            "expected_min": expected_min,
            "expected_max": expected_max
            if expected_max is not None
            else "unlimited",
            "actual_count": actual_count,
        }

        super().__init__(message, request_url, context)


class EmptyListingException(HTMLStructuralAssumptionException):
    """Raised when a listing page yields no story with a title.

    Attributes:
        page: The listing page number that came back empty.
    """

    def __init__(self, page: int, request_url: str) -> None:
        self.page = page
        super().__init__(
            selector="story_row",
            description="stories with a title",
            expected_min=1,
            expected_max=None,
            actual_count=0,
            request_url=request_url,
            message=(
                f"No stories found on page {page}. "
                "The page structure may have changed."
            ),
        )


class DataFormatAssumptionException(ScraperAssumptionException):
    """Raised when extracted data doesn't match the expected model.

    Raised when Pydantic validation rejects the fields pulled out of a page.
    This indicates the site's data format has changed or the extraction
    logic needs updating.
    """

    def __init__(
        self,
        errors: list[dict[str, Any]],
        failed_doc: dict[str, Any],
        model_name: str,
        request_url: str,
    ) -> None:
        """Initialize the exception.

        Args:
            errors: List of Pydantic validation errors.
            failed_doc: The fields that failed validation.
            model_name: Name of the Pydantic model that was being validated against.
            request_url: The URL of the page that produced this data.
        """
        self.errors = errors
        self.failed_doc = failed_doc
        self.model_name = model_name

        error_summary = ", ".join(
            f"{err['loc'][0]}: {err['msg']}" for err in errors
        )

        message = (
            f"Data validation failed for model '{model_name}': {error_summary}"
        )

        context = {
            "model": model_name,
            "error_count": len(errors),
            "failed_doc": failed_doc,
        }

        super().__init__(message, request_url, context)


# =============================================================================
# Transport errors
# =============================================================================


class TransientException(Exception):
    """Base class for transport errors.

    Transient exceptions represent network failures, server errors (5xx) or
    timeouts. hncli never retries them; the command fails and the user may
    run it again.
    """

    pass


class HTMLResponseAssumptionException(TransientException):
    """Raised when HTTP response has unexpected status code.

    Attributes:
        status_code: The actual HTTP status code received.
        expected_codes: List of status codes that were expected.
        url: The URL that returned the unexpected status.
        message: Human-readable error message.
    """

    def __init__(
        self,
        status_code: int,
        expected_codes: list[int],
        url: str,
    ) -> None:
        self.status_code = status_code
        self.expected_codes = expected_codes
        self.url = url

        expected_str = ", ".join(str(code) for code in expected_codes)
        self.message = (
            f"HTTP {status_code} from {url} (expected one of: {expected_str})"
        )
        super().__init__(self.message)


class RequestTimeoutException(TransientException):
    """Raised when a request times out.

    Attributes:
        url: The URL that timed out.
        timeout_seconds: The timeout duration in seconds.
        message: Human-readable error message.
    """

    def __init__(self, url: str, timeout_seconds: float) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.message = f"Request to {url} timed out after {timeout_seconds}s"
        super().__init__(self.message)


class RequestFailedException(TransientException):
    """Raised when connecting, sending or reading a response fails.

    Attributes:
        url: The URL being fetched.
        step: The step that failed ("connect", "send" or "read").
        message: Human-readable error message.
    """

    def __init__(self, url: str, step: str, cause: Exception) -> None:
        self.url = url
        self.step = step
        self.message = f"Failed to {step} request to {url}: {cause}"
        super().__init__(self.message)


# =============================================================================
# Cache errors
# =============================================================================


class CacheException(Exception):
    """Base class for snapshot cache conditions.

    The read-side conditions all mean the same thing to the user: run a
    listing command to refresh the cache.
    """

    def __init__(self, message: str, path: str) -> None:
        self.message = message
        self.path = path
        super().__init__(message)


class CacheMissingException(CacheException):
    """Raised when the cache file is absent or unreadable."""


class CacheExpiredException(CacheException):
    """Raised when the cache is older than its TTL.

    Attributes:
        age_seconds: How old the snapshot was when it was read.
    """

    def __init__(self, path: str, age_seconds: int, ttl_seconds: int) -> None:
        self.age_seconds = age_seconds
        self.ttl_seconds = ttl_seconds
        super().__init__(
            f"Cache expired ({age_seconds}s old, TTL is {ttl_seconds}s)",
            path,
        )


class CacheEmptyException(CacheException):
    """Raised when no line of the cache file decodes into a story."""


class CacheWriteException(CacheException):
    """Raised when the snapshot cannot be written to the cache file."""


# =============================================================================
# Lookup errors
# =============================================================================


class NotFoundException(Exception):
    """Base class for lookups that found nothing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RankNotFoundException(NotFoundException):
    """Raised when a rank is not present in the cached snapshot."""

    def __init__(self, rank: int) -> None:
        self.rank = rank
        super().__init__(f"Story with rank {rank} not found in cache")


class ProfileNotFoundException(NotFoundException):
    """Raised when a user page has none of the recognised profile fields."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(
            f"User '{username}' not found or has no public information"
        )


class InvalidSelectorError(RuntimeError):
    """Raised when a registered selector fails to compile.

    This is a programming error. Nothing in hncli catches it.
    """
