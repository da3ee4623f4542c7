import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "project_root": ".",
    "lint_report": "lint-results.json",
    "test_report": "test-results.json",
    "coverage_summary": "coverage/coverage-summary.json",
    "diff_dir": "__diff_output__",
    "snapshot_marker": "__image_snapshots__",
    "bucket": "prgate-screenshots",
    "fallback_scope": "local",  # scope used when the run has no PR number
    "update_screenshots_url": None,  # link to the workflow that re-approves screenshots
    "max_parallel_uploads": 4,
}

_PATH_KEYS = ("lint_report", "test_report", "coverage_summary", "diff_dir")


def load_config(config_path: str = ".prgate.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prgate.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["storage_endpoint"] = os.environ.get("AWS_ENDPOINT")
    config["storage_access_key"] = os.environ.get("AWS_ACCESS_KEY_ID")
    config["storage_secret_key"] = os.environ.get("AWS_SECRET_KEY")

    return config


def resolve_path(config: dict, key: str) -> Path:
    """Return the configured artifact path for ``key`` joined onto project_root.

    Absolute paths in the config are returned unchanged.
    """
    if key not in _PATH_KEYS:
        raise KeyError(f"{key!r} is not a path setting")
    return Path(config.get("project_root", ".")) / config[key]
