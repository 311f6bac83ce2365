"""Asynchronous driver for fetching and extracting Hacker News pages.

AsyncDriver pairs the request manager (I/O) with HackerNewsScraper
(parsing). Every page is fetched by its own task; tasks share the HTTP
client and nothing else. Extraction runs synchronously once a document has
arrived.

Multi-page fetches fail fast: the first page that fails to fetch or
extract fails the whole call, and the results of the other pages are
discarded. Pages still in flight are not cancelled; they run to completion
and their results are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from hncli.common.exceptions import ProfileNotFoundException
from hncli.common.request_manager import AsyncRequestManager
from hncli.data_types import Category, ItemDetail, Story, UserProfile
from hncli.scraper import HackerNewsScraper
from hncli.settings import Settings

logger = logging.getLogger(__name__)


class AsyncDriver:
    """Fetches Hacker News pages and hands them to the extractors.

    Example usage::

        async with AsyncDriver(Settings()) as driver:
            pages = await driver.fetch_many(Category.TOP, [1, 2, 3])
    """

    def __init__(
        self,
        settings: Settings | None = None,
        request_manager: AsyncRequestManager | None = None,
        scraper: HackerNewsScraper | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            settings: Configuration; defaults to ``Settings()``.
            request_manager: AsyncRequestManager for HTTP requests. If None,
                one is built from ``settings``.
            scraper: Extractors to use. If None, one is built for
                ``settings.base_url``.
        """
        self.settings = settings or Settings()
        self.base_url = self.settings.base_url.rstrip("/")
        self.request_manager = request_manager or AsyncRequestManager(
            timeout=self.settings.timeout,
            connect_timeout=self.settings.connect_timeout,
            user_agent=self.settings.user_agent,
        )
        self.scraper = scraper or HackerNewsScraper(self.base_url)

    async def close(self) -> None:
        await self.request_manager.close()

    async def __aenter__(self) -> AsyncDriver:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ── URLs ────────────────────────────────────────────────────

    def listing_url(self, category: Category, page: int = 1) -> str:
        url = f"{self.base_url}/{category.path}"
        if page > 1:
            url = f"{url}?p={page}"
        return url

    def item_url(self, item_id: str) -> str:
        return f"{self.base_url}/item?id={quote(item_id)}"

    def user_url(self, username: str) -> str:
        return f"{self.base_url}/user?id={quote(username)}"

    # ── Fetching ────────────────────────────────────────────────

    async def fetch_document(self, url: str) -> str:
        """Fetch the document at ``url``.

        Raises:
            TransientException: If the request fails.
        """
        return await self.request_manager.fetch_text(url)

    async def fetch_one(self, category: Category, page: int = 1) -> str:
        """Fetch the raw document of one listing page."""
        return await self.fetch_document(self.listing_url(category, page))

    async def fetch_stories(
        self, category: Category, page: int = 1
    ) -> list[Story]:
        """Fetch and extract one listing page.

        Raises:
            TransientException: If the request fails.
            EmptyListingException: If the page holds no story.
        """
        url = self.listing_url(category, page)
        logger.info(f"Fetching {category.value} page {page}")
        document = await self.fetch_document(url)
        return self.scraper.parse_listing(document, page, url)

    async def fetch_many(
        self, category: Category, pages: list[int]
    ) -> list[list[Story]]:
        """Fetch several listing pages concurrently.

        Args:
            category: Listing to fetch.
            pages: Page numbers, in the order results should come back.

        Returns:
            One story list per requested page, in the order of ``pages``.

        Raises:
            Exception: Whatever the first failing page raised. No partial
                result is returned.
        """
        logger.info(
            f"Fetching {len(pages)} {category.value} pages concurrently"
        )
        tasks = [
            asyncio.ensure_future(self.fetch_stories(category, page))
            for page in pages
        ]
        for task in tasks:
            task.add_done_callback(_log_discarded_failure)
        return list(await asyncio.gather(*tasks))

    async def fetch_item(self, item_id: str) -> ItemDetail:
        """Fetch and extract an item page."""
        url = self.item_url(item_id)
        logger.info(f"Fetching item {item_id}")
        document = await self.fetch_document(url)
        return self.scraper.parse_item(document, item_id, url)

    async def fetch_user(self, username: str) -> UserProfile:
        """Fetch and extract a user page.

        Raises:
            ProfileNotFoundException: If the page has no profile fields.
        """
        url = self.user_url(username)
        logger.info(f"Fetching user {username}")
        document = await self.fetch_document(url)
        profile = self.scraper.parse_profile(document, url)
        if profile is None:
            raise ProfileNotFoundException(username)
        return profile


def _log_discarded_failure(task: asyncio.Future) -> None:
    # Retrieves the exception of pages that failed after a sibling already
    # failed the gather, so asyncio does not report it as never retrieved.
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Page fetch failed: {task.exception()}")
