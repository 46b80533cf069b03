"""GitHub token lookup for the CLI.

Order: the GITHUB_TOKEN environment variable (set automatically inside
GitHub Actions), then the token of an existing `gh auth login` session.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_GH_TOKEN_TIMEOUT = 5


def _token_from_gh_cli() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TOKEN_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable; no session token")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when neither source provides one."""
    return os.environ.get("GITHUB_TOKEN") or _token_from_gh_cli()
