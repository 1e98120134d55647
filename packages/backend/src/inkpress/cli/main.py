"""Inkpress CLI — read and write posts from the terminal.

Usage:
    inkpress signup                      # Create an account (logs you in)
    inkpress login                       # Log in, session saved locally
    inkpress whoami                      # Who the saved session belongs to
    inkpress posts                       # Latest posts, newest first
    inkpress show <id>                   # One post
    inkpress publish -t "Hello" -c "..." # New post
    inkpress edit <id> -t ... -c ...     # Update your post
    inkpress delete <id>                 # Delete your post
    inkpress logout                      # Forget the saved session
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import sys

import click

from inkpress import __version__
from inkpress.client.api import DEFAULT_API_URL, ApiError, BlogClient
from inkpress.client.session import NotLoggedIn, SessionStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _back_to_login() -> None:
    click.echo("Logged out. Run `inkpress login` to sign in again.")


def _store(ctx: click.Context) -> SessionStore:
    store = ctx.obj.get("store")
    if store is None:
        store = SessionStore(on_logout=_back_to_login)
        ctx.obj["store"] = store
    return store


def _client(ctx: click.Context) -> BlogClient:
    return BlogClient(
        _store(ctx),
        base_url=ctx.obj["api_url"],
        transport=ctx.obj.get("transport"),
    )


def _call(ctx: click.Context, method: str, *args):
    """Run one client method, turning failures into a red line + exit 1."""

    async def go():
        async with _client(ctx) as client:
            return await getattr(client, method)(*args)

    try:
        return _run(go())
    except NotLoggedIn:
        click.secho("Please log in first (inkpress login).", fg="red", err=True)
        sys.exit(1)
    except ApiError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        if e.status_code == 401 and method not in ("login", "signup"):
            _store(ctx).logout()
        sys.exit(1)


def _print_post(post: dict) -> None:
    author = post.get("author") or {}
    click.secho(post["title"], bold=True)
    click.echo(f"by {author.get('username', '—')} · {post['created_at']} · {post['id']}")
    click.echo()
    click.echo(post["content"])


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="inkpress")
@click.option(
    "--api-url",
    envvar="INKPRESS_API_URL",
    default=DEFAULT_API_URL,
    show_default=True,
    help="Backend base URL",
)
@click.pass_context
def main(ctx: click.Context, api_url: str):
    """Inkpress — a minimal blog, from the terminal."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("api_url", api_url)


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@main.command()
@click.option("--username", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_context
def signup(ctx: click.Context, username: str, email: str, password: str):
    """Create an account and log in with it."""
    user = _call(ctx, "signup", username, email, password)
    click.secho(f"Welcome, {user['username']}!", fg="green")


@main.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx: click.Context, email: str, password: str):
    """Log in and save the session locally."""
    user = _call(ctx, "login", email, password)
    click.secho(f"Hi, {user['username']}", fg="green")


@main.command()
@click.pass_context
def logout(ctx: click.Context):
    """Forget the saved session."""
    _store(ctx).logout()


@main.command()
@click.option("--remote", is_flag=True, help="Ask the server instead of the saved session")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def whoami(ctx: click.Context, remote: bool, as_json: bool):
    """Show the logged-in user."""
    user = _call(ctx, "me") if remote else _store(ctx).user
    if user is None:
        click.echo("Not logged in.")
        sys.exit(1)
    if as_json:
        click.echo(json.dumps(user, indent=2))
    else:
        click.echo(f"{user['username']} <{user['email']}>")


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def posts(ctx: click.Context, as_json: bool):
    """List posts, newest first."""
    items = _call(ctx, "list_posts")
    if as_json:
        click.echo(json.dumps(items, indent=2))
        return
    if not items:
        click.echo("No articles published yet.")
        return
    for post in items:
        author = (post.get("author") or {}).get("username", "—")
        click.echo(f"{post['id']}  {post['title'][:50]:<50}  {author}")


@main.command()
@click.argument("post_id")
@click.pass_context
def show(ctx: click.Context, post_id: str):
    """Show one post."""
    _print_post(_call(ctx, "get_post", post_id))


@main.command()
@click.option("--title", "-t", prompt=True)
@click.option("--content", "-c", prompt=True)
@click.pass_context
def publish(ctx: click.Context, title: str, content: str):
    """Publish a new post."""
    post = _call(ctx, "create_post", title, content)
    click.secho(f"Published {post['id']}", fg="green")


@main.command()
@click.argument("post_id")
@click.option("--title", "-t", prompt=True)
@click.option("--content", "-c", prompt=True)
@click.pass_context
def edit(ctx: click.Context, post_id: str, title: str, content: str):
    """Replace the title and content of one of your posts."""
    post = _call(ctx, "update_post", post_id, title, content)
    click.secho(f"Updated {post['id']}", fg="green")


@main.command()
@click.argument("post_id")
@click.confirmation_option(prompt="Delete this post?")
@click.pass_context
def delete(ctx: click.Context, post_id: str):
    """Delete one of your posts."""
    result = _call(ctx, "delete_post", post_id)
    click.secho(result.get("message", "Post deleted"), fg="green")


if __name__ == "__main__":
    main()
