"""Checked HTML element wrapper for registry-backed CSS querying.

This module provides CheckedHtmlElement, a wrapper around
lxml.html.HtmlElement that runs selectors from the query registry and
validates the number of results against expected counts.
"""

from __future__ import annotations

from lxml.html import HtmlElement

from hncli.common.exceptions import (
    HTMLStructuralAssumptionException,
)
from hncli.common.registry import pattern


class CheckedHtmlElement:
    """Wrapper around HtmlElement with validated selectors.

    ``checked_css()`` looks the selector up by name in the query registry,
    runs it against the wrapped element and raises
    HTMLStructuralAssumptionException if the result count falls outside
    ``[min_count, max_count]``.
    """

    def __init__(self, element: HtmlElement, request_url: str = "") -> None:
        """Initialize the checked element wrapper.

        Args:
            element: The lxml HtmlElement to wrap.
            request_url: Optional URL for error context.
        """
        self._element = element
        self._request_url = request_url

    def checked_css(
        self,
        name: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]:
        """Run a registered CSS selector with count validation.

        Args:
            name: Name of the selector in the query registry.
            description: Human-readable description of what's being selected.
            min_count: Minimum number of elements expected (default: 1).
            max_count: Maximum number of elements expected (None = unlimited).

        Returns:
            Matching elements in document order, each wrapped to support
            nested checked queries.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.

        Example::

            tree = CheckedHtmlElement(lxml.html.fromstring(html))
            rows = tree.checked_css("story_row", "story rows", min_count=0)
            for row in rows:
                links = row.checked_css("title_link", "title", max_count=1)
        """
        results = pattern(name)(self._element)

        actual_count = len(results)
        if actual_count < min_count or (
            max_count is not None and actual_count > max_count
        ):
            raise HTMLStructuralAssumptionException(
                selector=name,
                description=description,
                expected_min=min_count,
                expected_max=max_count,
                actual_count=actual_count,
                request_url=self._request_url,
            )

        return [
            CheckedHtmlElement(result, self._request_url) for result in results
        ]

    @property
    def element(self) -> HtmlElement:
        """The wrapped lxml element."""
        return self._element

    def __getattr__(self, name: str):
        """Delegate all other attributes to the wrapped element."""
        return getattr(self._element, name)
