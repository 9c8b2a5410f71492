"""Command line front end: ``quillpress posts``, ``quillpress login`` ..."""
from __future__ import annotations

import logging
import sys

import click

from quillpress.client.api import BlogApiClient
from quillpress.client.session import AuthSession, SessionStore
from quillpress.client.views import (
    CategoryListView,
    FetchView,
    PostDetailView,
    PostListView,
    SearchView,
    ViewStatus,
)
from quillpress.config import ClientConfig
from quillpress.logging_config import configure_logging


def _show(view: FetchView) -> None:
    view.load()
    click.echo(view.render())
    if view.status is ViewStatus.ERROR:
        sys.exit(1)


@click.group()
@click.option("--api-url", envvar="QUILLPRESS_API_URL", default=ClientConfig.API_URL, show_default=True)
@click.option("--session-file", envvar="QUILLPRESS_SESSION_FILE", default=str(ClientConfig.SESSION_FILE), show_default=True)
@click.pass_context
def cli(ctx: click.Context, api_url: str, session_file: str) -> None:
    """Browse and comment on a Quillpress blog."""
    configure_logging(logging.WARNING)
    api = BlogApiClient(api_url)
    ctx.obj = AuthSession(api, SessionStore(session_file))


@cli.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_obj
def login(session: AuthSession, email: str, password: str) -> None:
    """Log in and remember the session."""
    if not session.login(email, password):
        raise click.ClickException(session.error or "Login failed")
    click.echo(f"Logged in as {session.user['name']}")


@cli.command()
@click.option("--name", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_obj
def register(session: AuthSession, name: str, email: str, password: str) -> None:
    """Create an account and log in."""
    if not session.register(name, email, password):
        raise click.ClickException(session.error or "Registration failed")
    click.echo(f"Welcome, {session.user['name']}")


@cli.command()
@click.pass_obj
def logout(session: AuthSession) -> None:
    """Forget the stored session."""
    session.logout()
    click.echo("Logged out")


@cli.command()
@click.pass_obj
def whoami(session: AuthSession) -> None:
    """Show the logged-in user."""
    if not session.is_authenticated:
        click.echo("Not logged in")
        return
    user = session.user
    click.echo(f"{user['name']} <{user['email']}> ({user['role']})")


@cli.command()
@click.pass_obj
def posts(session: AuthSession) -> None:
    """List the latest posts."""
    _show(PostListView(session.api))


@cli.command()
@click.argument("post_id")
@click.pass_obj
def post(session: AuthSession, post_id: str) -> None:
    """Show one post with its comments."""
    _show(PostDetailView(session.api, post_id, session))


@cli.command()
@click.argument("post_id")
@click.argument("content")
@click.pass_obj
def comment(session: AuthSession, post_id: str, content: str) -> None:
    """Add a comment to a post."""
    view = PostDetailView(session.api, post_id, session).load()
    if view.status is ViewStatus.ERROR:
        raise click.ClickException(view.error or "Post not found")
    if not view.add_comment(content):
        raise click.ClickException(view.comment_error or "Failed to add comment")
    click.echo(view.render())


@cli.command()
@click.argument("query")
@click.pass_obj
def search(session: AuthSession, query: str) -> None:
    """Search posts by title, content or tag."""
    _show(SearchView(session.api, query))


@cli.command()
@click.pass_obj
def categories(session: AuthSession) -> None:
    """List categories and their post counts."""
    _show(CategoryListView(session.api))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
