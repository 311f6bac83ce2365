"""Process-wide registry of compiled CSS selectors.

Every selector the extractors use is registered here by name. A selector is
compiled the first time it is requested and the compiled object is shared by
all callers afterwards, including extraction running in worker threads.

Usage::

    from hncli.common.registry import pattern

    rows = pattern("story_row")(tree)
"""

from __future__ import annotations

import threading
from types import MappingProxyType

from cssselect import SelectorError
from lxml.cssselect import CSSSelector

from hncli.common.exceptions import InvalidSelectorError

PATTERNS: MappingProxyType[str, str] = MappingProxyType(
    {
        # Listing pages
        "story_row": "tr.athing",
        "subtext": "tr > td.subtext",
        "title_link": "span.titleline > a",
        "rank": "span.rank",
        "score": "span.score",
        "age": "span.age a",
        "user": "a.hnuser",
        "anchor": "a",
        # Item pages
        "title_line": "span.titleline",
        "top_text": "div.toptext",
        "comment_row": "tr.athing.comtr",
        "comment_head": "span.comhead",
        "comment_text": "div.commtext",
        "indent": "td.ind",
        # User pages
        "row": "tr",
        "cell": "td",
    }
)

_compiled: dict[str, CSSSelector] = {}
_lock = threading.Lock()


def pattern(name: str) -> CSSSelector:
    """Return the compiled selector registered under ``name``.

    Args:
        name: A key of ``PATTERNS``.

    Returns:
        The shared compiled selector.

    Raises:
        KeyError: If no selector is registered under ``name``.
        InvalidSelectorError: If the registered selector does not compile.
    """
    compiled = _compiled.get(name)
    if compiled is not None:
        return compiled

    with _lock:
        # Another thread may have compiled it while we waited.
        compiled = _compiled.get(name)
        if compiled is None:
            compiled = _compile(name, PATTERNS[name])
            _compiled[name] = compiled
    return compiled


def _compile(name: str, css: str) -> CSSSelector:
    try:
        return CSSSelector(css)
    except SelectorError as e:
        raise InvalidSelectorError(
            f"Invalid CSS selector for '{name}': {css}"
        ) from e


def compiled_names() -> frozenset[str]:
    """Names of the selectors compiled so far."""
    return frozenset(_compiled)
