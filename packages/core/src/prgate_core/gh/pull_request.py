from __future__ import annotations

import logging
import os
import re
import subprocess

from github import Github

logger = logging.getLogger(__name__)

REPORT_MARKER = "<!-- prgate-report -->"

_PULL_REF_RE = re.compile(r"^refs/pull/(\d+)/")
_MODIFIED_STATUSES = ("modified", "renamed", "changed")


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_modified_files(pr) -> list[str]:
    """Return paths of pre-existing files the PR edits (added/removed files excluded)."""
    return [f.filename for f in pr.get_files() if f.status in _MODIFIED_STATUSES]


def get_local_modified_files(base_ref: str) -> list[str]:
    """Return files modified relative to base_ref in the local git checkout.

    Used for runs outside a pull request. Returns [] when git is unavailable
    or the ref does not exist.
    """
    try:
        result = subprocess.run(
            ["git", "diff", "--name-only", "--diff-filter=MR", base_ref],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning("Could not list locally modified files: %s", e)
        return []
    if result.returncode != 0:
        logger.warning("git diff against %s failed: %s", base_ref, result.stderr.strip())
        return []
    return [line for line in result.stdout.splitlines() if line.strip()]


def detect_pr_number(env=None) -> int | None:
    """Return the PR number from GITHUB_REF (refs/pull/<n>/merge) or None."""
    env = os.environ if env is None else env
    match = _PULL_REF_RE.match(env.get("GITHUB_REF", ""))
    if match:
        return int(match.group(1))
    return None


def find_report_comment(pr):
    """Return the issue comment previously posted by prgate, or None."""
    found = None
    for comment in pr.get_issue_comments():
        if REPORT_MARKER in (comment.body or ""):
            found = comment
    return found


def upsert_report_comment(pr, body: str):
    """Edit the existing prgate comment in place, or create it on first run."""
    existing = find_report_comment(pr)
    if existing is not None:
        existing.edit(body)
        return existing
    return pr.create_issue_comment(body)
