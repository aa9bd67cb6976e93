"""run command — start the Discord bot."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from ptal_core.gh.pull_request import GitHubSource, get_client
from ptal_core.reconcile import make_bot_filter

console = Console()


@click.command("run")
@click.option("--guild", "guild_id", type=int, default=None, help="Sync the slash command to one guild only.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level. Overrides config file.",
)
@click.pass_context
def run_cmd(ctx, guild_id: int | None, log_level: str | None):
    """Start the bot and serve /ptal until interrupted.

    \b
    Environment variables:
      DISCORD_TOKEN   Discord bot token (required)
      GITHUB_TOKEN    GitHub token (optional; falls back to gh CLI, then anonymous)
    """
    from ptal_cli.bot import PTALClient, PTALHandlers

    config = ctx.obj["config"]
    if guild_id is not None:
        config["guild_id"] = guild_id
    if log_level is not None:
        config["log_level"] = log_level.upper()

    if not config.get("discord_token"):
        raise click.UsageError("DISCORD_TOKEN environment variable is not set.")
    if not config.get("github_token"):
        console.print("[yellow]No GitHub token found; only public repositories can be read.[/yellow]")

    source = GitHubSource(get_client(config.get("github_token")))
    handlers = PTALHandlers(source, make_bot_filter(config))
    client = PTALClient(config, handlers)

    console.print(f"[green]Starting bot with /{config['command_name']}[/green]")
    client.run(config["discord_token"], log_level=logging.getLevelName(config["log_level"]))
