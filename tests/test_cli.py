"""Tests for the ``hn`` command line interface.

Commands run through click's CliRunner against the mock server, with the
rank cache redirected into the test's temp dir.
"""

import time

import click
import pytest
from click.testing import CliRunner

from hncli.cache import CacheStore
from hncli.cli import cli
from hncli.data_types import Story


@pytest.fixture
def run(server_url, cache_path):
    """Invoke the CLI against the mock server and temporary cache."""
    runner = CliRunner()

    def invoke(*args, base_url=None):
        return runner.invoke(
            cli,
            [
                "--base-url",
                base_url or server_url,
                "--cache-file",
                str(cache_path),
                *args,
            ],
        )

    return invoke


@pytest.fixture
def seeded_cache(cache_path):
    """A fresh cache holding two stories, one of them without a link."""
    cache = CacheStore(cache_path)
    cache.save(
        [
            Story(
                rank=1,
                id="1001",
                title="A story with a long thread",
                url="https://thread.example/post",
            ),
            Story(rank=2, id="1002", title="Ask HN: Anyone else?"),
        ]
    )
    return cache


class TestListingCommands:
    """Tests for top, new, best, ask, show and job."""

    def test_no_subcommand_lists_top_stories(self, run, cache_path):
        """Running without a subcommand shall behave like ``top --page 1``."""
        result = run()

        assert result.exit_code == 0, result.output
        assert "1. Story number 1 (site1.example)" in result.output
        assert "10 points | by user1 | 3 hours ago | 1 comments" in result.output
        assert len(CacheStore(cache_path).load()) == 30

    def test_top_with_page(self, run, cache_path):
        result = run("top", "--page", "2")

        assert result.exit_code == 0, result.output
        assert "31. Story number 31" in result.output
        assert CacheStore(cache_path).find_by_rank(45).id == "40045"

    @pytest.mark.parametrize("alias", ["t", "n", "b", "a", "s", "j"])
    def test_aliases(self, run, alias):
        result = run(alias, "-p", "1")

        assert result.exit_code == 0, result.output
        assert "Story number 1" in result.output

    def test_listing_overwrites_cache(self, run, cache_path):
        assert run("top", "-p", "2").exit_code == 0
        assert run("new").exit_code == 0

        assert len(CacheStore(cache_path).load()) == 30

    def test_empty_page_reports_error(self, run, cache_path):
        result = run("top", "-p", "4")

        assert result.exit_code == 1
        assert "Failed to fetch top stories" in result.output
        assert "No stories found on page 4" in result.output
        assert not cache_path.exists()

    def test_server_error_reports_label(self, run, flaky_server_url):
        result = run("ask", "-p", "2", base_url=flaky_server_url)

        assert result.exit_code == 1
        assert "Failed to fetch Ask HN stories" in result.output
        assert "HTTP 500" in result.output

    def test_page_must_be_positive(self, run):
        result = run("top", "-p", "0")

        assert result.exit_code == 2

    def test_unwritable_cache_reports_error(self, server_url, tmp_path):
        """A cache that cannot be written shall fail with a clean message."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        result = CliRunner().invoke(
            cli,
            [
                "--base-url",
                server_url,
                "--cache-file",
                str(blocker / "sub" / "stories.cache"),
                "top",
            ],
        )

        assert result.exit_code == 1
        assert "Failed to write cache file" in result.output
        assert not isinstance(result.exception, OSError)
        assert "Story number 1" not in result.output


class TestMulti:
    """Tests for the multi command."""

    def test_fetches_pages_in_parallel(self, run, cache_path):
        result = run("multi", "-n", "2")

        assert result.exit_code == 0, result.output
        assert "Fetched 60 stories from 2 pages in parallel" in result.output
        stories = CacheStore(cache_path).load()
        assert [s.rank for s in stories] == list(range(1, 61))

    def test_alias_and_category(self, run):
        result = run("m", "-c", "show", "-n", "1")

        assert result.exit_code == 0, result.output
        assert "Fetched 30 stories from 1 pages in parallel" in result.output

    def test_failure_writes_nothing(self, run, cache_path, flaky_server_url):
        """A failing page shall fail the command and leave the cache alone."""
        result = run("multi", "-n", "2", base_url=flaky_server_url)

        assert result.exit_code == 1
        assert "Failed to fetch multiple pages" in result.output
        assert not cache_path.exists()

    def test_unknown_category(self, run):
        result = run("multi", "-c", "bogus")

        assert result.exit_code == 2

    def test_unwritable_cache_reports_error(self, server_url, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        result = CliRunner().invoke(
            cli,
            [
                "--base-url",
                server_url,
                "--cache-file",
                str(blocker / "stories.cache"),
                "multi",
                "-n",
                "1",
            ],
        )

        assert result.exit_code == 1
        assert "Failed to write cache file" in result.output
        assert not isinstance(result.exception, OSError)


class TestDetails:
    """Tests for the details command."""

    def test_details_by_rank(self, run, seeded_cache):
        result = run("details", "1")

        assert result.exit_code == 0, result.output
        assert "A story with a long thread" in result.output
        assert "Link:" in result.output
        assert "https://thread.example/post" in result.output
        assert "Comments: (13 total)" in result.output
        assert "author0" in result.output
        assert "Comment body 9" in result.output
        assert "Comment body 10" not in result.output
        assert "... 3 more comments" in result.output

    def test_details_alias_without_comments(self, run, seeded_cache):
        result = run("d", "2")

        assert result.exit_code == 0, result.output
        assert "First line of the question. Second line." in result.output
        assert "No comments yet" in result.output

    def test_nested_comments_are_indented(self, run, seeded_cache):
        result = run("details", "1")

        lines = result.output.splitlines()
        assert any(line.startswith("    ● author2") for line in lines)
        assert any(line.startswith("      ● author8") for line in lines)

    def test_without_cache(self, run):
        result = run("details", "1")

        assert result.exit_code == 1
        assert "No cached stories" in result.output

    def test_with_expired_cache(self, run, cache_path):
        CacheStore(cache_path).save(
            [Story(rank=1, id="1001", title="Old")],
            now=int(time.time()) - 1000,
        )

        result = run("details", "1")

        assert result.exit_code == 1
        assert "Cache expired (" in result.output
        assert "TTL is 300s" in result.output
        assert "Run a list command (top, new, etc.) first." in result.output
        assert "No cached stories" not in result.output

    def test_with_empty_cache(self, run, cache_path):
        cache_path.parent.mkdir(parents=True)
        cache_path.write_text(f"{int(time.time())}\ngarbage\n")

        result = run("details", "1")

        assert result.exit_code == 1
        assert "No stories in cache" in result.output

    def test_unknown_rank(self, run, seeded_cache):
        result = run("details", "7")

        assert result.exit_code == 1
        assert "Story with rank 7 not found in cache" in result.output
        assert "Run a list command first" in result.output

    def test_non_numeric_argument_is_an_item_id(self, run):
        """A non-numeric argument shall be fetched as an item id directly."""
        result = run("details", "abc")

        assert result.exit_code == 0, result.output
        assert "No comments yet" in result.output


class TestOpen:
    """Tests for the open command."""

    @pytest.fixture
    def launched(self, monkeypatch):
        urls = []

        def fake_launch(url, *args, **kwargs):
            urls.append(url)
            return 0

        monkeypatch.setattr(click, "launch", fake_launch)
        return urls

    def test_opens_story_link(self, run, seeded_cache, launched):
        result = run("open", "1")

        assert result.exit_code == 0, result.output
        assert launched == ["https://thread.example/post"]
        assert "Opened: https://thread.example/post" in result.output

    def test_opens_discussion_without_link(
        self, run, seeded_cache, launched, server_url
    ):
        """A story without a link shall open its discussion page."""
        result = run("o", "2")

        assert result.exit_code == 0, result.output
        assert launched == [f"{server_url}/item?id=1002"]
        assert "Opened HN discussion:" in result.output

    def test_launch_failure(self, run, seeded_cache, monkeypatch):
        monkeypatch.setattr(click, "launch", lambda url, **kwargs: 1)

        result = run("open", "1")

        assert result.exit_code == 1
        assert "Failed to open https://thread.example/post" in result.output

    def test_without_cache(self, run, launched):
        result = run("open", "1")

        assert result.exit_code == 1
        assert "Run a list command (top, new, etc.) first." in result.output
        assert launched == []

    def test_unknown_rank(self, run, seeded_cache, launched):
        result = run("open", "9")

        assert result.exit_code == 1
        assert "Story with rank 9 not found in cache" in result.output


class TestUser:
    """Tests for the user command."""

    def test_shows_profile(self, run):
        result = run("user", "pg")

        assert result.exit_code == 0, result.output
        assert "Profile: pg" in result.output
        assert "Karma: 157316" in result.output
        assert "Created: October 9, 2006" in result.output

    def test_partial_profile(self, run):
        result = run("u", "karmaonly")

        assert result.exit_code == 0, result.output
        assert "Karma: 42" in result.output
        assert "Created" not in result.output

    def test_unknown_user(self, run):
        result = run("user", "nobody")

        assert result.exit_code == 1
        assert (
            "User 'nobody' not found or has no public information"
            in result.output
        )
