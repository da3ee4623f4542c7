"""GitHub token resolution with gh CLI fallback.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (GitHub Actions / explicit override)
  2. DANGER_GITHUB_API_TOKEN (the bot token name existing Danger setups export)
  3. `gh auth token` (GitHub CLI session, for local runs after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS = ("GITHUB_TOKEN", "DANGER_GITHUB_API_TOKEN")


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or hung.
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no source is available.

    Never raises; callers decide whether a missing token is a usage error.
    """
    for name in _TOKEN_ENV_VARS:
        token = os.environ.get(name)
        if token:
            logger.debug("Using GitHub token from %s.", name)
            return token

    token = _gh_cli_token()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token
