"""PageElement: the element interface the extractors work against.

PageElement wraps CheckedHtmlElement and adds the small set of reads the
extractors need: optional single-element lookups, text, attributes, inner
HTML and link resolution against the site root.
"""

from __future__ import annotations

from html import escape

from lxml import html

from hncli.common.checked_html import CheckedHtmlElement


def resolve_link(base_url: str, href: str) -> str:
    """Resolve an href found on a Hacker News page to an absolute URL.

    Absolute links are returned unchanged. Anything else is treated as a
    path under the site root, with leading slashes collapsed so that
    ``/item?id=1`` and ``item?id=1`` resolve alike.

    Examples:
        >>> resolve_link("https://news.ycombinator.com", "item?id=1")
        'https://news.ycombinator.com/item?id=1'
        >>> resolve_link("https://news.ycombinator.com", "//x")
        'https://news.ycombinator.com/x'
        >>> resolve_link("https://news.ycombinator.com", "https://a.com/")
        'https://a.com/'
    """
    if href.startswith("http"):
        return href
    return f"{base_url.rstrip('/')}/{href.lstrip('/')}"


class PageElement:
    """Element interface used by the extractors.

    Attributes:
        _element: The underlying CheckedHtmlElement.
        _base_url: Site root for resolving relative links.
    """

    def __init__(self, element: CheckedHtmlElement, base_url: str = ""):
        self._element = element
        self._base_url = base_url

    @classmethod
    def from_document(
        cls, document: str, base_url: str, request_url: str = ""
    ) -> PageElement:
        """Parse a raw HTML document.

        An empty or whitespace-only document parses as an empty page rather
        than raising, so the extractors report the missing structure
        themselves.

        Args:
            document: Raw HTML text.
            base_url: Site root for resolving relative links.
            request_url: URL the document came from, for error context.
        """
        if not document.strip():
            document = "<html><body></body></html>"
        tree = html.document_fromstring(document)
        return cls(CheckedHtmlElement(tree, request_url), base_url)

    def query(
        self,
        name: str,
        description: str,
        min_count: int = 0,
        max_count: int | None = None,
    ) -> list[PageElement]:
        """Query elements by registered selector name.

        Unlike CheckedHtmlElement.checked_css the default minimum is zero;
        the extractors tolerate missing elements unless they say otherwise.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        return [
            PageElement(elem, self._base_url)
            for elem in self._element.checked_css(
                name, description, min_count, max_count
            )
        ]

    def first(self, name: str, description: str) -> PageElement | None:
        """Return the first element matching ``name``, or None."""
        matches = self.query(name, description)
        return matches[0] if matches else None

    def text_content(self) -> str:
        """Visible text content of the element and its descendants."""
        return self._element.text_content()

    def text_nodes(self) -> list[str]:
        """Individual text nodes of the element, in document order."""
        return list(self._element.element.itertext())

    def get_attribute(self, name: str) -> str | None:
        """Value of attribute ``name``, or None if it doesn't exist."""
        return self._element.get(name)

    def inner_html(self) -> str:
        """Markup between the element's opening and closing tags."""
        elem = self._element.element
        leading = escape(elem.text, quote=False) if elem.text else ""
        return leading + "".join(
            html.tostring(child, encoding="unicode") for child in elem
        )

    def resolve(self, href: str) -> str:
        """Resolve ``href`` against the site root."""
        return resolve_link(self._base_url, href)
