"""Snapshot cache of the most recently fetched listing.

The cache lets later commands address stories by the rank they were shown
with. It is a single text file:

    1718000000
    1|40001|Show HN: A pipe ∣ in the title|https://example.com|120|pg|45
    2|40002|Ask HN: Something||33|dang|

Line one is the epoch-seconds timestamp of the write. Every following line
is one story with seven ``|``-separated fields: rank, id, title, url,
points, author, comment count. Missing optional fields are empty. A literal
``|`` inside a text field is written as ``∣`` (U+2223) and a line feed as
``␤`` (U+2424); both are turned back on read. Records are separated by a
bare line feed and nothing else, so other line-break characters in a title
(carriage return, form feed, U+2028 and the like) are stored as they are. Every listing fetch overwrites the whole file.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path

from hncli.common.exceptions import (
    CacheEmptyException,
    CacheExpiredException,
    CacheMissingException,
    CacheWriteException,
    RankNotFoundException,
)
from hncli.data_types import CacheRecord, Story
from hncli.settings import CACHE_TTL_SECONDS, default_cache_path

logger = logging.getLogger(__name__)

DELIMITER = "|"
FIELD_COUNT = 7

# Applied to text fields on write; the inverse is applied on read.
ESCAPES = {DELIMITER: "∣", "\n": "␤"}
UNESCAPES = {v: k for k, v in ESCAPES.items()}


def _translate(value: str, table: dict[str, str]) -> str:
    for old, new in table.items():
        value = value.replace(old, new)
    return value


def escape_field(value: str | None) -> str:
    return _translate(value, ESCAPES) if value else ""


def unescape_field(value: str) -> str | None:
    return _translate(value, UNESCAPES) if value else None


def _int_field(value: str) -> int | None:
    return int(value) if value.isdecimal() else None


def encode_story(story: Story) -> str:
    """Encode a story as one cache line. The story's age is not kept."""
    return DELIMITER.join(
        [
            str(story.rank),
            escape_field(story.id),
            escape_field(story.title),
            escape_field(story.url),
            "" if story.points is None else str(story.points),
            escape_field(story.author),
            "" if story.comment_count is None else str(story.comment_count),
        ]
    )


def decode_story(line: str) -> Story | None:
    """Decode one cache line, or return None if it is malformed."""
    parts = line.split(DELIMITER)
    if len(parts) != FIELD_COUNT:
        return None

    rank, story_id, title, url, points, author, comments = parts
    rank_value = _int_field(rank)
    title_value = unescape_field(title)
    if not rank_value or not title_value:
        return None

    return Story(
        rank=rank_value,
        id=unescape_field(story_id) or "",
        title=title_value,
        url=unescape_field(url),
        points=_int_field(points),
        author=unescape_field(author),
        comment_count=_int_field(comments),
    )


class CacheStore:
    """Reads and writes the listing snapshot file.

    Attributes:
        path: Location of the cache file.
        ttl: Seconds a snapshot stays valid.
    """

    def __init__(
        self,
        path: Path | None = None,
        ttl: int = CACHE_TTL_SECONDS,
    ) -> None:
        self.path = Path(path) if path is not None else default_cache_path()
        self.ttl = ttl

    def save(self, stories: list[Story], now: int | None = None) -> None:
        """Replace the snapshot with ``stories``.

        The file is written to a sibling temporary file first and renamed
        into place, so a reader sees either the old or the new snapshot.

        Args:
            stories: Stories to store, in display order.
            now: Timestamp to record; defaults to the current time.

        Raises:
            CacheWriteException: If the directory or file cannot be written.
        """
        if now is None:
            now = int(time.time())

        content = f"{now}\n" + "\n".join(encode_story(s) for s in stories)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".stories-", suffix=".tmp"
            )
        except OSError as e:
            raise CacheWriteException(
                f"Failed to write cache file: {e}", str(self.path)
            ) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheWriteException(
                f"Failed to write cache file: {e}", str(self.path)
            ) from e
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Cached {len(stories)} stories to {self.path}")

    def read(self) -> CacheRecord:
        """Parse the cache file without checking its age.

        Raises:
            CacheMissingException: If the file is absent or unreadable.
        """
        try:
            with self.path.open(encoding="utf-8", newline="") as f:
                content = f.read()
        except FileNotFoundError as e:
            raise CacheMissingException(
                "No cached stories", str(self.path)
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise CacheMissingException(
                f"Failed to read cache file: {e}", str(self.path)
            ) from e

        # Only a line feed ends a record; titles may hold other breaks.
        lines = content.split("\n")
        if lines and not lines[-1]:
            lines.pop()
        timestamp = None
        if lines:
            try:
                timestamp = int(lines[0].strip())
            except ValueError:
                logger.warning(
                    f"Unreadable cache timestamp {lines[0]!r}, "
                    "skipping expiry check"
                )

        stories: list[Story] = []
        for number, line in enumerate(lines[1:], start=2):
            story = decode_story(line)
            if story is None:
                logger.debug(f"Dropping malformed cache line {number}")
                continue
            stories.append(story)

        return CacheRecord(timestamp=timestamp, stories=stories)

    def load(self, now: int | None = None) -> list[Story]:
        """Load the cached stories.

        Args:
            now: Current time in epoch seconds; defaults to the real clock.

        Returns:
            The stories, in the order they were saved.

        Raises:
            CacheMissingException: If the file is absent or unreadable.
            CacheExpiredException: If the snapshot is older than the TTL.
            CacheEmptyException: If no line decodes into a story.
        """
        if now is None:
            now = int(time.time())

        record = self.read()
        if record.is_expired(now, self.ttl):
            raise CacheExpiredException(
                str(self.path), record.age(now) or 0, self.ttl
            )

        if not record.stories:
            raise CacheEmptyException("No stories in cache", str(self.path))

        return record.stories

    def find_by_rank(self, rank: int, now: int | None = None) -> Story:
        """Return the cached story shown at ``rank``.

        Raises:
            RankNotFoundException: If no cached story has that rank.
            CacheException: If the cache cannot be loaded.
        """
        for story in self.load(now):
            if story.rank == rank:
                return story
        raise RankNotFoundException(rank)
