"""CLI entry point for ptalbot.

Commands:
  run      — start the Discord bot
  preview  — render the PTAL message for a pull request in the terminal
  init     — interactive setup wizard that writes .ptal.yml
"""

from __future__ import annotations

import importlib.metadata

import click

from ptal_cli.commands.init import init_cmd
from ptal_cli.commands.preview import preview_cmd
from ptal_cli.commands.run import run_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("ptalbot"),
    prog_name="ptal",
)
@click.option(
    "--config",
    "config_path",
    default=".ptal.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PTAL_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str):
    """Post PTAL requests for GitHub pull requests to Discord and keep them up to date."""
    from ptal_core.config import load_config
    from ptal_cli.auth import resolve_github_token

    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Resolve the GitHub token once so every subcommand sees the same one.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path


main.add_command(run_cmd)
main.add_command(preview_cmd)
main.add_command(init_cmd)
