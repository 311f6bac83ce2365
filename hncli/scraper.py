"""Hacker News page extractors.

HackerNewsScraper turns the HTML of listing, item and user pages into
Story, ItemDetail and UserProfile values. Extraction is pure: it takes a
document string and never touches the network.

Missing optional markup (no score on a job posting, no subtext row at all,
no top text) degrades to absent fields. Only a listing page with no usable
story at all is treated as an error, since that is how a change in the
site's markup shows up.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from hncli.common.exceptions import (
    DataFormatAssumptionException,
    EmptyListingException,
)
from hncli.common.page_element import PageElement
from hncli.common.text import leading_int, normalize_lines
from hncli.data_types import Comment, ItemDetail, Story, UserProfile
from hncli.settings import BASE_URL, COMMENT_LIMIT, ITEMS_PER_PAGE

logger = logging.getLogger(__name__)

COMMENT_KEYWORDS = ("comment", "discuss")

PROFILE_FIELDS = {
    "user": "username",
    "created": "created",
    "karma": "karma",
    "about": "about_html",
}


class HackerNewsScraper:
    """Extractors for the three kinds of Hacker News page.

    Attributes:
        base_url: Site root used to resolve relative links.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url.rstrip("/")

    def _page(self, document: str, url: str) -> PageElement:
        return PageElement.from_document(document, self.base_url, url)

    # ── Listings ────────────────────────────────────────────────

    def parse_listing(
        self, document: str, page: int, url: str = ""
    ) -> list[Story]:
        """Extract the stories of one listing page.

        Story rows and their subtext rows are paired by position: the i-th
        subtext row describes the i-th story row. Rows without a title are
        skipped.

        Args:
            document: Raw HTML of the listing page.
            page: 1-based page number, used to synthesise ranks.
            url: URL the page came from, for error context.

        Returns:
            Stories in document order.

        Raises:
            EmptyListingException: If no story with a title was found.
            DataFormatAssumptionException: If a story's fields fail validation.
        """
        root = self._page(document, url)
        story_rows = root.query("story_row", "story rows")
        subtext_rows = root.query("subtext", "subtext rows")

        if len(story_rows) != len(subtext_rows):
            logger.debug(
                f"{url or 'listing'}: {len(story_rows)} story rows but "
                f"{len(subtext_rows)} subtext rows"
            )

        stories: list[Story] = []
        for idx, row in enumerate(story_rows):
            fields = self._story_fields(row, page, idx)
            if fields is None:
                continue
            if idx < len(subtext_rows):
                fields.update(self._subtext_fields(subtext_rows[idx]))
            stories.append(_validate(Story, fields, url))

        if not stories:
            raise EmptyListingException(page=page, request_url=url)

        logger.debug(f"Extracted {len(stories)} stories from page {page}")
        return stories

    def _story_fields(
        self, row: PageElement, page: int, idx: int
    ) -> dict[str, Any] | None:
        title_link = row.first("title_link", "title link")
        title = title_link.text_content() if title_link is not None else ""
        if not title:
            return None

        rank = None
        rank_label = row.first("rank", "rank label")
        if rank_label is not None:
            rank = leading_int(rank_label.text_content().strip().rstrip("."))
        if rank is None:
            rank = (page - 1) * ITEMS_PER_PAGE + idx + 1

        href = title_link.get_attribute("href")
        return {
            "rank": rank,
            "id": row.get_attribute("id") or "unknown",
            "title": title,
            "url": title_link.resolve(href) if href else None,
        }

    def _subtext_fields(self, subtext: PageElement) -> dict[str, Any]:
        fields: dict[str, Any] = {}

        score = subtext.first("score", "score")
        if score is not None:
            fields["points"] = leading_int(score.text_content())

        user = subtext.first("user", "author link")
        if user is not None:
            fields["author"] = user.text_content()

        age = subtext.first("age", "age link")
        if age is not None:
            fields["age"] = age.text_content()

        for link in subtext.query("anchor", "subtext links"):
            text = link.text_content()
            if any(keyword in text for keyword in COMMENT_KEYWORDS):
                fields["comment_count"] = leading_int(text)
                break

        return fields

    # ── Items ───────────────────────────────────────────────────

    def parse_item(
        self, document: str, item_id: str = "", url: str = ""
    ) -> ItemDetail:
        """Extract an item page.

        The title and link come from the first title line. A title line
        without a link yields a title and no URL. Only the first
        ``COMMENT_LIMIT`` comments are extracted; the rest are counted.

        Args:
            document: Raw HTML of the item page.
            item_id: Identifier of the item, carried into the result.
            url: URL the page came from, for error context.
        """
        root = self._page(document, url)

        title = link_url = None
        title_line = root.first("title_line", "title line")
        if title_line is not None:
            link = title_line.first("anchor", "title link")
            if link is not None:
                title = link.text_content()
                href = link.get_attribute("href")
                link_url = link.resolve(href) if href else None
            else:
                title = title_line.text_content().strip() or None

        body_text = None
        top_text = root.first("top_text", "top text")
        if top_text is not None:
            body_text = normalize_lines(top_text.text_content()) or None

        comment_rows = root.query("comment_row", "comment rows")
        comments = [
            self._comment(row, url) for row in comment_rows[:COMMENT_LIMIT]
        ]

        return _validate(
            ItemDetail,
            {
                "id": item_id,
                "title": title,
                "url": link_url,
                "body_text": body_text,
                "comments": comments,
                "total_comment_count": len(comment_rows),
            },
            url,
        )

    def _comment(self, row: PageElement, url: str) -> Comment:
        depth = 0
        indent = row.first("indent", "indent cell")
        if indent is not None:
            depth = leading_int(indent.get_attribute("indent")) or 0

        fields: dict[str, Any] = {"depth": depth, "id": row.get_attribute("id")}

        head = row.first("comment_head", "comment header")
        if head is not None:
            author = head.first("user", "comment author")
            if author is not None:
                fields["author"] = author.text_content()
            age = head.first("age", "comment age")
            if age is not None:
                fields["age"] = age.text_content() or None

        body = row.first("comment_text", "comment text")
        if body is not None:
            # Joining text nodes with spaces keeps paragraphs apart.
            fields["body_text"] = normalize_lines(" ".join(body.text_nodes()))

        return _validate(Comment, fields, url)

    # ── Users ───────────────────────────────────────────────────

    def parse_profile(self, document: str, url: str = "") -> UserProfile | None:
        """Extract the labelled fields of a user page.

        Only rows with exactly two cells whose first cell ends in a colon
        are considered. The ``about`` field keeps its markup; the others
        are plain text.

        Returns:
            The profile, or None if no recognised field was found.
        """
        root = self._page(document, url)
        fields: dict[str, str] = {}

        for row in root.query("row", "table rows"):
            cells = row.query("cell", "row cells")
            if len(cells) != 2:
                continue

            label = cells[0].text_content().strip()
            if not label.endswith(":"):
                continue

            name = PROFILE_FIELDS.get(label[:-1])
            if name is None:
                continue

            if name == "about_html":
                fields[name] = cells[1].inner_html().strip()
            else:
                fields[name] = cells[1].text_content().strip()

        if not fields:
            return None
        return _validate(UserProfile, fields, url)


def _validate(model: type, fields: dict[str, Any], url: str) -> Any:
    try:
        return model(**fields)
    except ValidationError as e:
        raise DataFormatAssumptionException(
            errors=e.errors(),
            failed_doc=fields,
            model_name=model.__name__,
            request_url=url,
        ) from e
