from __future__ import annotations

from prgate_core.annotations import CheckResult

MODIFIED_SNAPSHOTS_WARNING = "Some screenshots were modified in this PR"


def touches_snapshots(modified_files: list[str], marker: str) -> bool:
    return any(marker in path for path in modified_files)


def check_modified_snapshots(modified_files: list[str], marker: str) -> CheckResult:
    """Warn once when the change set edits stored visual baselines."""
    result = CheckResult("snapshots")
    if touches_snapshots(modified_files, marker):
        result.warn(MODIFIED_SNAPSHOTS_WARNING)
    return result
