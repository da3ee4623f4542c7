"""Checks that turn CI report artifacts into PR annotations.

Three artifacts are read from fixed locations under project_root:
  lint_report       ESLint JSON formatter output
  test_report       Jest --json output
  coverage_summary  Istanbul json-summary output

Absent lint or test data is a defect in the CI pipeline, so a missing or
corrupt file becomes a blocking annotation. Coverage is informational only and
degrades to a warning.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from prgate_core.annotations import CheckResult
from prgate_core.config import resolve_path

logger = logging.getLogger(__name__)

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_FAILURE_MESSAGE_LIMIT = 1500

LINT_ERROR = 2
LINT_WARNING = 1


def read_json(path: Path):
    """Read and parse a JSON artifact. Raises OSError or ValueError on failure."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def relative_path(file_path: str, root: str | Path) -> str:
    """Return file_path relative to root, in POSIX form.

    Relative paths are assumed to already be project-relative. Absolute paths
    outside root are returned unchanged.
    """
    path = Path(file_path)
    if not path.is_absolute():
        return path.as_posix()
    try:
        return path.resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def check_lint(config: dict) -> CheckResult:
    result = CheckResult("lint")
    root = config.get("project_root", ".")
    path = resolve_path(config, "lint_report")

    findings: list[tuple[int, str, str, int | None]] = []
    try:
        report = read_json(path)
        if not isinstance(report, list):
            raise ValueError(f"expected a list of file records, got {type(report).__name__}")
        for record in report:
            rel_path = relative_path(record["filePath"], root)
            for msg in record.get("messages", []):
                text = f"{msg['message']} `{msg.get('ruleId')}`"
                findings.append((msg.get("severity"), text, rel_path, msg.get("line")))
    except Exception as e:
        logger.warning("Could not read lint results from %s: %s", path, e)
        result.fail(f"Could not read lint results: {e}")
        return result

    for severity, text, rel_path, line in findings:
        if severity == LINT_ERROR:
            result.fail(text, rel_path, line)
        elif severity == LINT_WARNING:
            result.warn(text, rel_path, line)
    logger.debug("Lint: %d finding(s), status %s", len(result.annotations), result.status.value)
    return result


def format_coverage(kind: str, stats: dict) -> str:
    covered = _format_number(stats["covered"])
    total = _format_number(stats["total"])
    pct = _format_number(stats["pct"])
    return f"{covered} / {total} {kind} ({pct}%)"


def check_coverage(config: dict) -> CheckResult:
    result = CheckResult("coverage")
    path = resolve_path(config, "coverage_summary")
    try:
        totals = read_json(path)["total"]
        summary = ", ".join(format_coverage(kind, stats) for kind, stats in totals.items())
    except Exception as e:
        logger.warning("Could not read coverage from %s: %s", path, e)
        result.warn(f'Could not read coverage file: "{e}"')
        return result
    result.message(f"Code coverage: {summary}")
    return result


def _strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _failure_body(rel_path: str, failed: list[dict]) -> str:
    lines = [f"Tests failed in `{rel_path}`:", ""]
    for assertion in failed:
        name = assertion.get("fullName") or assertion.get("title") or "unnamed test"
        lines.append(f"**{name}**")
        message = _strip_ansi("\n".join(assertion.get("failureMessages") or [])).strip()
        if len(message) > _FAILURE_MESSAGE_LIMIT:
            message = message[:_FAILURE_MESSAGE_LIMIT] + "\n... [truncated]"
        if message:
            lines.extend(["```", message, "```"])
        lines.append("")
    return "\n".join(lines).rstrip()


def check_test_results(config: dict) -> CheckResult:
    result = CheckResult("tests")
    root = config.get("project_root", ".")
    path = resolve_path(config, "test_report")

    try:
        report = read_json(path)
        if report.get("success"):
            passed = report["numPassedTests"]
            total = report["numTotalTests"]
            pending = report.get("numPendingTests", 0)
            result.message(f":+1: Jest tests passed: {passed}/{total} ({pending} skipped)")
            return result

        failures: list[tuple[str, str | None, int | None]] = []
        for suite in report.get("testResults", []):
            rel_path = relative_path(suite["name"], root)
            failed = [a for a in suite.get("assertionResults", []) if a.get("status") == "failed"]
            if failed:
                location = failed[0].get("location") or {}
                failures.append((_failure_body(rel_path, failed), rel_path, location.get("line")))
            elif suite.get("status") == "failed":
                message = _strip_ansi(suite.get("message") or "").strip() or "Test suite failed to run."
                failures.append((f"Test suite `{rel_path}` failed:\n\n```\n{message}\n```", rel_path, None))
    except Exception as e:
        logger.warning("Could not read test results from %s: %s", path, e)
        result.fail(f"Could not read test results: {e}")
        return result

    if not failures:
        result.fail("Jest reported an unsuccessful run without any failing test.")
    for body, rel_path, line in failures:
        result.fail(body, rel_path, line)
    return result
