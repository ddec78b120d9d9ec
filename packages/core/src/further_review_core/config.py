import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG_PATH = ".further-review-bot.yml"

DEFAULT_CONFIG: dict = {
    # provider name -> true (default options) | mapping of options | false (disabled)
    "review": {"further_review_file": True},
    "status_context": "Further Review",
    # set when the token cannot read /user (e.g. GitHub Actions)
    "bot_login": None,
    "target_url": None,
    "sign_off_phrases": ["lgtm", ":+1:"],
    "max_workers": 4,
}


def default_config() -> dict:
    """Return a copy of the built-in defaults that is safe to mutate."""
    return {
        **DEFAULT_CONFIG,
        "review": dict(DEFAULT_CONFIG["review"]),
        "sign_off_phrases": list(DEFAULT_CONFIG["sign_off_phrases"]),
    }


def load_config(config_path: str = DEFAULT_CONFIG_PATH, cli_overrides: Optional[dict] = None) -> dict:
    """
    Load bot configuration by merging (in order of precedence):
      1. Built-in defaults
      2. The YAML config file, if present
      3. CLI argument overrides
    """
    config = default_config()

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    # An empty "review:" section means no providers, not the defaults.
    if config.get("review") is None:
        config["review"] = {}

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
