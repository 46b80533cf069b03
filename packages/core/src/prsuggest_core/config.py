import os
from pathlib import Path
from typing import Optional

import yaml

from prsuggest_core.utils.globs import parse_patterns

DEFAULT_CONFIG: dict = {
    "platform": "openai",  # "openai" | "anthropic"
    "model_name": "",  # empty = provider default model
    "rules": "",  # extra review rules appended to the prompt
    "files_to_ignore": [],  # glob patterns, list or comma-separated string
    "delete_existing_reviews": False,  # remove comments left by earlier bot reviews first
    "deletion_delay": 1.5,  # seconds between comment deletions (secondary rate limit)
    "review_draft_prs": False,
}

_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def get_boolean_value(value) -> bool:
    """Interpret a config flag. Strings count as true only when they read "true"."""
    if isinstance(value, bool):
        return value
    if not value:
        return False
    return str(value).strip().lower() == "true"


def load_config(config_path: str = ".prsuggest.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prsuggest.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "files_to_ignore": list(DEFAULT_CONFIG["files_to_ignore"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["files_to_ignore"] = parse_patterns(config.get("files_to_ignore"))
    config["delete_existing_reviews"] = get_boolean_value(config.get("delete_existing_reviews"))
    config["review_draft_prs"] = get_boolean_value(config.get("review_draft_prs"))
    try:
        config["deletion_delay"] = float(config.get("deletion_delay") or 0)
    except (TypeError, ValueError):
        raise ValueError(f"deletion_delay must be a number of seconds, got {config.get('deletion_delay')!r}") from None

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def api_key_env_var(platform: str) -> str:
    """Name of the environment variable holding the key for a platform."""
    if platform not in _API_KEY_ENV:
        raise ValueError(f"Unsupported AI platform: {platform!r}. Choose 'openai' or 'anthropic'.")
    return _API_KEY_ENV[platform]


def resolve_api_key(config: dict) -> Optional[str]:
    """Return the API key for the configured platform, or None if unset."""
    platform = config.get("platform", DEFAULT_CONFIG["platform"])
    if platform not in _API_KEY_ENV:
        raise ValueError(f"Unsupported AI platform: {platform!r}. Choose 'openai' or 'anthropic'.")
    return config.get(f"{platform}_api_key")
