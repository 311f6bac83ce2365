"""Text helpers shared by the extractors and the renderer."""

from __future__ import annotations

import textwrap

NBSP = "\xa0"


def normalize_lines(text: str) -> str:
    """Collapse multi-line text into one line.

    Splits into lines, trims each, drops the empty ones and joins the rest
    with single spaces.

    Examples:
        >>> normalize_lines("  first line\\n\\n   second  \\n")
        'first line second'
    """
    return " ".join(
        stripped for line in text.splitlines() if (stripped := line.strip())
    )


def leading_int(text: str | None) -> int | None:
    """Parse the leading whitespace-separated numeral of ``text``.

    Non-breaking spaces are treated as ordinary spaces first, since the site
    writes comment counts as ``12&nbsp;comments``.

    Examples:
        >>> leading_int("123 points")
        123
        >>> leading_int("12\\xa0comments")
        12
        >>> leading_int("discuss") is None
        True
    """
    if not text:
        return None
    words = text.replace(NBSP, " ").split()
    if not words:
        return None
    try:
        return int(words[0])
    except ValueError:
        return None


def wrap_text(text: str, width: int) -> list[str]:
    """Greedily word-wrap ``text`` to lines narrower than ``width``.

    Each line keeps at least one column free at the right edge, so a line
    holds at most ``width - 1`` characters. Words are never split: a word
    that alone does not fit gets a line of its own, unmodified.

    Examples:
        >>> wrap_text("aaaa bbbb cccc", 9)
        ['aaaa', 'bbbb', 'cccc']
        >>> wrap_text("aaaa bbbb cccc", 10)
        ['aaaa bbbb', 'cccc']
        >>> wrap_text("tiny enormousword x", 6)
        ['tiny', 'enormousword', 'x']
    """
    return textwrap.wrap(
        text,
        width=max(width - 1, 1),
        break_long_words=False,
        break_on_hyphens=False,
    )
