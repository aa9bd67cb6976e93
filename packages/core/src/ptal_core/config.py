import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "command_name": "ptal",
    "guild_id": None,  # None = register the slash command globally
    "bot_suffixes": ["[bot]"],  # reviewer logins ending in any of these are automation
    "ignored_reviewers": [],  # extra logins whose reviews never count (e.g. "renovate")
    "log_level": "INFO",
}

_LIST_KEYS = ("bot_suffixes", "ignored_reviewers")


def load_config(config_path: str = ".ptal.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ptal.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG}
    for key in _LIST_KEYS:
        config[key] = list(DEFAULT_CONFIG[key])

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["discord_token"] = os.environ.get("DISCORD_TOKEN")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
