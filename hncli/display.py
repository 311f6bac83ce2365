"""Terminal rendering of stories, items and profiles."""

from __future__ import annotations

import click

from hncli.data_types import CommentNode, ItemDetail, Story, UserProfile


def extract_domain(url: str) -> str:
    """Host part of ``url``, or ``url`` itself if it has no scheme.

    Examples:
        >>> extract_domain("https://example.com/a/b")
        'example.com'
        >>> extract_domain("example")
        'example'
    """
    _, sep, rest = url.partition("://")
    if not sep:
        return url
    return rest.split("/", 1)[0]


def ansi_link(url: str, text: str) -> str:
    """Wrap ``text`` in an OSC 8 terminal hyperlink to ``url``."""
    styled = click.style(text, fg="cyan", underline=True)
    return f"\x1b]8;;{url}\x1b\\{styled}\x1b]8;;\x1b\\"


def _dim(text: str) -> str:
    return click.style(text, fg="bright_black")


def render_stories(stories: list[Story]) -> None:
    for story in stories:
        domain = f" {_dim(f'({extract_domain(story.url)})')}" if story.url else ""
        click.echo(
            f"{_dim(f'{story.rank}.')} "
            f"{click.style(story.title, fg='bright_white', bold=True)}{domain}"
        )

        meta = []
        if story.points is not None:
            meta.append(click.style(f"{story.points} points", fg="yellow"))
        if story.author:
            meta.append(click.style(f"by {story.author}", fg="cyan"))
        if story.age:
            meta.append(_dim(story.age))
        if story.comment_count is not None:
            meta.append(
                click.style(f"{story.comment_count} comments", fg="green")
            )

        if meta:
            click.echo(f"   {' | '.join(meta)}")
        click.echo()


def render_item(item: ItemDetail) -> None:
    if item.title:
        click.echo(click.style(item.title, fg="bright_white", bold=True))
        if item.url:
            link_label = click.style("Link:", fg="bright_cyan")
            click.echo(f"{link_label} {ansi_link(item.url, item.url)}")
        click.echo()

    if item.body_text:
        click.echo(f"{item.body_text}\n")

    if not item.has_comments:
        click.echo(_dim("No comments yet"))
        return

    click.echo(
        f"{click.style('Comments:', fg='bright_cyan', bold=True)} "
        f"{_dim(f'({item.total_comment_count} total)')}\n"
    )
    for node in item.thread():
        _render_comment(node)

    if item.remaining_comment_count:
        click.echo(_dim(f"... {item.remaining_comment_count} more comments"))


def _render_comment(node: CommentNode) -> None:
    comment = node.comment
    indent = "  " * comment.depth
    click.echo(
        f"{indent}{_dim('●')} {click.style(comment.author, fg='cyan')} "
        f"{_dim(comment.age or '')}"
    )
    for line in comment.wrapped_lines():
        click.echo(f"{indent}  {line}")
    click.echo()

    for child in node.children:
        _render_comment(child)


def render_profile(username: str, profile: UserProfile) -> None:
    click.echo(
        f"{click.style('Profile:', fg='bright_cyan', bold=True)} "
        f"{click.style(username, fg='bright_white')}\n"
    )
    for label, value in (
        ("Username", profile.username),
        ("Created", profile.created),
        ("Karma", profile.karma),
        ("About", profile.about_html),
    ):
        if value is not None:
            click.echo(
                f"{click.style(label, fg='bright_yellow')}: "
                f"{click.style(value, fg='bright_white')}"
            )
    click.echo()
