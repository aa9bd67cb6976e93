"""preview command — show the PTAL message for a pull request without posting it."""

from __future__ import annotations

import getpass

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ptal_core.errors import PTALError
from ptal_core.gh.pull_request import GitHubSource, get_client
from ptal_core.models import Identity, RenderedNotification
from ptal_core.notifier import request_review
from ptal_core.reconcile import make_bot_filter

console = Console()


def print_notification(notification: RenderedNotification) -> None:
    color = f"#{notification.color:06x}"
    console.print(notification.content, markup=False)

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold")
    table.add_column()
    if notification.author_name is not None:
        table.add_row("Requested by", notification.author_name)
    for f in notification.fields:
        table.add_row(f.name, escape(f.value))
    if notification.footer:
        table.add_row("", f"[dim]{notification.footer}[/dim]")

    title = f"[link={notification.url}]{escape(notification.title)}[/link]"
    console.print(Panel(table, title=title, title_align="left", border_style=color))

    for b in notification.buttons:
        target = b.url if b.url else f"action: {b.custom_id}"
        console.print(f"  {escape(f'[{b.emoji} {b.label}]')}  [dim]{escape(target)}[/dim]")


@click.command("preview")
@click.argument("reference")
@click.option("--description", "-d", default="", help="Description shown after **PTAL**.")
@click.option("--deployment", default="", help="Link to a deployment of the change.")
@click.option("--as", "requester", default=None, help="Requester name shown on the message. Defaults to $USER.")
@click.pass_context
def preview_cmd(ctx, reference: str, description: str, deployment: str, requester: str | None):
    """Render the PTAL message for REFERENCE (URL or owner/repo#number)."""
    config = ctx.obj["config"]
    source = GitHubSource(get_client(config.get("github_token")))
    identity = Identity(display_name=requester or getpass.getuser())

    try:
        notification = request_review(reference, description, deployment, identity, source, make_bot_filter(config))
    except PTALError as e:
        raise click.ClickException(f"{e.user_message} ({e})")

    print_notification(notification)
