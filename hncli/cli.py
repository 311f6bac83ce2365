"""hncli: browse Hacker News from the terminal.

Usage:
    hn                          # Same as ``hn top --page 1``
    hn top --page 2             # Also new, best, ask, show, job
    hn details 3                # Item at rank 3 of the last listing
    hn open 3                   # Open rank 3 in the browser
    hn user pg                  # Show a user profile
    hn multi -c best -n 3       # Fetch pages 1-3 concurrently

Every listing command overwrites the rank cache used by ``details`` and
``open``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

import click

from hncli.cache import CacheStore
from hncli.common.exceptions import (
    CacheException,
    CacheWriteException,
    NotFoundException,
    RankNotFoundException,
    ScraperAssumptionException,
    TransientException,
)
from hncli.data_types import Category, Story
from hncli.display import render_item, render_profile, render_stories
from hncli.driver.async_driver import AsyncDriver
from hncli.settings import BASE_URL, Settings, default_cache_path

T = TypeVar("T")

ALIASES = {
    "t": "top",
    "n": "new",
    "b": "best",
    "a": "ask",
    "s": "show",
    "j": "job",
    "d": "details",
    "o": "open",
    "u": "user",
    "m": "multi",
}

LISTING_LABELS = {
    Category.TOP: "top",
    Category.NEW: "new",
    Category.BEST: "best",
    Category.ASK: "Ask HN",
    Category.SHOW: "Show HN",
    Category.JOB: "job",
}


class AliasedGroup(click.Group):
    """Group that also resolves the one-letter command aliases."""

    def get_command(
        self, ctx: click.Context, cmd_name: str
    ) -> click.Command | None:
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: list[str]):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


@contextmanager
def surface_errors(context: str) -> Iterator[None]:
    """Turn hncli errors into ClickExceptions with a descriptive message."""
    try:
        yield
    except (TransientException, ScraperAssumptionException) as e:
        raise click.ClickException(f"{context}: {e}") from e
    except CacheWriteException as e:
        raise click.ClickException(str(e)) from e
    except CacheException as e:
        raise click.ClickException(
            f"{e}. Run a list command (top, new, etc.) first."
        ) from e
    except NotFoundException as e:
        raise click.ClickException(str(e)) from e


def run_with_driver(
    settings: Settings, work: Callable[[AsyncDriver], Awaitable[T]]
) -> T:
    """Run ``work`` against a driver inside a fresh event loop."""

    async def _go() -> T:
        async with AsyncDriver(settings) as driver:
            return await work(driver)

    return asyncio.run(_go())


def _cache(settings: Settings) -> CacheStore:
    return CacheStore(settings.cache_path, ttl=settings.cache_ttl)


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.version_option(package_name="hncli")
@click.option(
    "--base-url",
    envvar="HN_BASE_URL",
    default=BASE_URL,
    show_default=True,
    help="Site to scrape.",
)
@click.option(
    "--cache-file",
    envvar="HN_CACHE_FILE",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Rank cache location [default: user cache dir].",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    base_url: str,
    cache_file: Path | None,
    verbose: bool,
) -> None:
    """A Hacker News command-line client."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.obj = Settings(
        base_url=base_url,
        cache_path=cache_file or default_cache_path(),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(top, page=1)


# ------------------------------------------------------------------
# Listings
# ------------------------------------------------------------------


def show_listing(settings: Settings, category: Category, page: int) -> None:
    label = LISTING_LABELS[category]
    with surface_errors(f"Failed to fetch {label} stories"):
        stories = run_with_driver(
            settings, lambda driver: driver.fetch_stories(category, page)
        )
        _cache(settings).save(stories)
    render_stories(stories)


def _listing_command(category: Category) -> click.Command:
    @click.command(
        category.value, help=f"List {LISTING_LABELS[category]} stories."
    )
    @click.option(
        "-p",
        "--page",
        type=click.IntRange(min=1),
        default=1,
        show_default=True,
        help="Page number.",
    )
    @click.pass_obj
    def command(settings: Settings, page: int) -> None:
        show_listing(settings, category, page)

    return command


for _category in Category:
    cli.add_command(_listing_command(_category))

top = cli.commands[Category.TOP.value]


@cli.command()
@click.option(
    "-c",
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=Category.TOP.value,
    show_default=True,
)
@click.option(
    "-n",
    "--num-pages",
    type=click.IntRange(min=1),
    default=3,
    show_default=True,
)
@click.pass_obj
def multi(settings: Settings, category: str, num_pages: int) -> None:
    """Fetch several pages of a listing at once."""
    listing = Category(category)
    pages = list(range(1, num_pages + 1))

    with surface_errors("Failed to fetch multiple pages"):
        results = run_with_driver(
            settings, lambda driver: driver.fetch_many(listing, pages)
        )
        stories: list[Story] = [
            story for page in results for story in page
        ]
        _cache(settings).save(stories)
    render_stories(stories)

    click.echo(
        f"\n{click.style('✓', fg='green')} Fetched "
        f"{click.style(str(len(stories)), bold=True)} stories from "
        f"{click.style(str(num_pages), bold=True)} pages in parallel"
    )


# ------------------------------------------------------------------
# Lookups
# ------------------------------------------------------------------


@cli.command()
@click.argument("id_or_rank")
@click.pass_obj
def details(settings: Settings, id_or_rank: str) -> None:
    """Show a story and its comments.

    ID_OR_RANK is a rank from the last listing, or an item id.
    """
    item_id = id_or_rank
    if id_or_rank.isdecimal():
        rank = int(id_or_rank)
        try:
            item_id = _cache(settings).find_by_rank(rank).id
        except RankNotFoundException as e:
            raise click.ClickException(
                f"{e}. Run a list command first."
            ) from e
        except CacheException as e:
            # Missing, expired and empty caches each keep their own message.
            raise click.ClickException(
                f"{e}. Run a list command (top, new, etc.) first."
            ) from e

    with surface_errors("Failed to fetch item details"):
        item = run_with_driver(
            settings, lambda driver: driver.fetch_item(item_id)
        )
    render_item(item)


@cli.command("open")
@click.argument("rank", type=click.IntRange(min=1))
@click.pass_obj
def open_story(settings: Settings, rank: int) -> None:
    """Open a story from the last listing in the browser."""
    with surface_errors("Failed to load cached stories"):
        story = _cache(settings).find_by_rank(rank)

    if story.url:
        url, label = story.url, "Opened:"
    else:
        url = f"{settings.base_url.rstrip('/')}/item?id={story.id}"
        label = "Opened HN discussion:"

    if click.launch(url) != 0:
        raise click.ClickException(f"Failed to open {url} in browser")
    click.echo(f"{click.style(label, fg='green')} {url}")


@cli.command()
@click.argument("username")
@click.pass_obj
def user(settings: Settings, username: str) -> None:
    """Show a user's profile."""
    with surface_errors(f"Failed to fetch user: {username}"):
        profile = run_with_driver(
            settings, lambda driver: driver.fetch_user(username)
        )
    render_profile(username, profile)


def main() -> None:
    """Entry point for the ``hn`` console script."""
    cli()
