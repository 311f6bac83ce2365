"""Data types produced by the extractors and stored in the cache.

Story, Comment, ItemDetail and UserProfile are Pydantic models so that
extracted fields are validated at construction. Rank and id are deliberately
separate fields: rank is the story's position in the listing it was fetched
from and changes between fetches, id is the site's stable identifier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from hncli.common.text import wrap_text
from hncli.settings import COMMENT_LIMIT, WRAP_WIDTH


class Category(Enum):
    """Story listings, mapped to their remote paths."""

    TOP = "top"
    NEW = "new"
    BEST = "best"
    ASK = "ask"
    SHOW = "show"
    JOB = "job"

    @property
    def path(self) -> str:
        return _CATEGORY_PATHS[self]


_CATEGORY_PATHS = {
    Category.TOP: "news",
    Category.NEW: "newest",
    Category.BEST: "best",
    Category.ASK: "ask",
    Category.SHOW: "show",
    Category.JOB: "jobs",
}


class Story(BaseModel):
    """One entry of a story listing."""

    rank: int = Field(..., gt=0, description="Position in the listing")
    id: str = Field(..., description="Site-assigned item identifier")
    title: str = Field(..., min_length=1, description="Display title")
    url: str | None = Field(None, description="Absolute link")
    points: int | None = Field(None, ge=0, description="Score")
    author: str | None = Field(None, description="Submitter")
    comment_count: int | None = Field(
        None, ge=0, description="Number of comments"
    )
    age: str | None = Field(
        None, description="Relative timestamp, only set on fresh fetches"
    )


class Comment(BaseModel):
    """One comment of an item page."""

    depth: int = Field(0, ge=0, description="Indentation level")
    id: str | None = Field(None, description="Comment item identifier")
    author: str = Field("[deleted]", description="Commenter")
    age: str | None = Field(None, description="Relative timestamp")
    body_text: str = Field("", description="Whitespace-normalised body")

    def wrapped_lines(self, total_width: int = WRAP_WIDTH) -> list[str]:
        """Body wrapped so it still fits ``total_width`` once indented.

        Each depth level costs two columns of indentation, plus two for the
        body's own gutter.
        """
        return wrap_text(self.body_text, total_width - (self.depth * 2 + 2))


@dataclass
class CommentNode:
    """A comment and the replies nested under it."""

    comment: Comment
    children: list[CommentNode] = field(default_factory=list)


def build_comment_tree(comments: list[Comment]) -> list[CommentNode]:
    """Rebuild the reply tree of a pre-order comment list.

    Each comment becomes a child of the nearest preceding comment with a
    smaller depth. A jump of more than one level (depth 0 followed by depth
    3) nests directly under that comment. Comments with no shallower
    predecessor are roots.

    Args:
        comments: Comments in document (pre-order) order.

    Returns:
        The root nodes, in document order.
    """
    roots: list[CommentNode] = []
    stack: list[CommentNode] = []

    for comment in comments:
        node = CommentNode(comment)
        while stack and stack[-1].comment.depth >= comment.depth:
            stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


class ItemDetail(BaseModel):
    """An item page: the story itself and its first comments."""

    id: str = Field("", description="Item identifier")
    title: str | None = Field(None, description="Story title")
    url: str | None = Field(None, description="Absolute story link")
    body_text: str | None = Field(None, description="Top text, if any")
    comments: list[Comment] = Field(
        default_factory=list,
        description="Leading comments in document order",
    )
    total_comment_count: int = Field(0, ge=0)

    @property
    def has_comments(self) -> bool:
        return self.total_comment_count > 0

    @property
    def remaining_comment_count(self) -> int:
        """Comments on the page beyond the materialised ones."""
        return max(self.total_comment_count - COMMENT_LIMIT, 0)

    def thread(self) -> list[CommentNode]:
        return build_comment_tree(self.comments)


class UserProfile(BaseModel):
    """Labelled fields of a user page. Every field is optional."""

    username: str | None = None
    created: str | None = None
    karma: str | None = None
    about_html: str | None = Field(
        None, description="About section with its markup preserved"
    )


class CacheRecord(BaseModel):
    """A listing snapshot as read from or written to the cache file."""

    timestamp: int | None = Field(
        None, description="Epoch seconds; None when unreadable"
    )
    stories: list[Story] = Field(default_factory=list)

    def age(self, now: int) -> int | None:
        if self.timestamp is None:
            return None
        return now - self.timestamp

    def is_expired(self, now: int, ttl: int) -> bool:
        """True once the snapshot is more than ``ttl`` seconds old.

        A snapshot exactly ``ttl`` seconds old is still valid. A snapshot
        without a readable timestamp never expires.
        """
        age = self.age(now)
        return age is not None and age > ttl
