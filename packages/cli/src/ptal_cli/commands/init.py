"""init command — interactive setup wizard that writes .ptal.yml."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from ptal_core.config import DEFAULT_CONFIG

console = Console()


def _split_logins(text: str) -> list[str]:
    return [login.strip() for login in text.split(",") if login.strip()]


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Set up ptalbot for your server.

    Asks for the slash command name, an optional guild to register it in,
    and reviewers whose reviews should never count, then writes the config file.
    """
    path = Path(ctx.obj.get("config_path", ".ptal.yml") if ctx.obj else ".ptal.yml")
    console.print(f"\n[bold cyan]ptal init[/bold cyan] — writing {path}\n")

    command_name = click.prompt("Slash command name", default=DEFAULT_CONFIG["command_name"])
    guild_id = click.prompt(
        "Guild ID to register the command in (blank = all servers)",
        default="",
        show_default=False,
    ).strip()
    ignored = click.prompt(
        "Reviewer logins to ignore, comma separated (bots ending in [bot] are always ignored)",
        default="",
        show_default=False,
    )

    config: dict = {"command_name": command_name}
    if guild_id:
        if not guild_id.isdigit():
            raise click.BadParameter("Guild ID must be numeric.", param_hint="guild")
        config["guild_id"] = int(guild_id)
    logins = _split_logins(ignored)
    if logins:
        config["ignored_reviewers"] = logins

    _write_config(path, config)
    console.print(f"[green]Created {path}[/green]")
    console.print("\nStart the bot with: [bold]DISCORD_TOKEN=... ptal run[/bold]")
