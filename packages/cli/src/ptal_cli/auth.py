"""Credential resolution for the bot.

GitHub token, first match wins:
  1. GITHUB_TOKEN environment variable
  2. `gh auth token` (GitHub CLI session)
  3. none — the bot reads public repositories anonymously
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token or None. Never raises."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    token = _gh_cli_token()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
        return token

    logger.debug("No GitHub token found; using anonymous GitHub access.")
    return None
