"""Core CI report orchestration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console

from prgate_core.annotations import Annotation, CheckResult, Kind, RunReport, Status
from prgate_core.gh.pull_request import REPORT_MARKER, upsert_report_comment
from prgate_core.reports import check_coverage, check_lint, check_test_results
from prgate_core.screenshots import StoreFactory, archive_screenshots
from prgate_core.snapshots import check_modified_snapshots

console = Console()
logger = logging.getLogger(__name__)

_SECTIONS = (
    (Kind.FAIL, "Fails", ":no_entry_sign:"),
    (Kind.WARN, "Warnings", ":warning:"),
    (Kind.MESSAGE, "Messages", ":book:"),
)


@dataclass
class ReviewContext:
    """What the runner knows about the change being reviewed.

    pr_number is None for local runs outside a pull request.
    """

    pr_number: Optional[int] = None
    modified_files: list[str] = field(default_factory=list)


async def _scan_snapshots(config: dict, context: ReviewContext) -> CheckResult:
    return check_modified_snapshots(context.modified_files, config["snapshot_marker"])


async def run_checks_async(
    config: dict,
    context: ReviewContext,
    store_factory: Optional[StoreFactory] = None,
) -> RunReport:
    """Launch every check concurrently and join them into one RunReport.

    Checks share no state and none waits on another. A check that raises
    instead of returning a CheckResult is reported as a failure of that check
    only.
    """
    checks = [
        ("lint", asyncio.to_thread(check_lint, config)),
        ("tests", asyncio.to_thread(check_test_results, config)),
        ("coverage", asyncio.to_thread(check_coverage, config)),
        ("screenshots", archive_screenshots(config, context.pr_number, store_factory)),
        ("snapshots", _scan_snapshots(config, context)),
    ]
    outcomes = await asyncio.gather(*(coro for _, coro in checks), return_exceptions=True)

    report = RunReport()
    for (name, _), outcome in zip(checks, outcomes):
        if isinstance(outcome, BaseException):
            logger.error("Check %s raised unexpectedly: %s", name, outcome)
            crashed = CheckResult(name)
            crashed.fail(f"Check `{name}` crashed: {outcome}")
            report.results.append(crashed)
            continue
        logger.debug("Check %s finished: %s", name, outcome.status.value)
        report.results.append(outcome)
    return report


def run_checks(
    config: dict,
    context: ReviewContext,
    store_factory: Optional[StoreFactory] = None,
) -> RunReport:
    return asyncio.run(run_checks_async(config, context, store_factory))


def _row(icon: str, annotation: Annotation) -> str:
    cell = annotation.body
    if annotation.location:
        cell += f"\n\n`{annotation.location}`"
    return f"<tr>\n<td>{icon}</td>\n<td>\n\n{cell}\n\n</td>\n</tr>"


def build_report_body(report: RunReport) -> str:
    """Build the PR comment: one HTML table per kind, then markdown blocks."""
    lines = ["## CI report\n"]

    fails, warnings = len(report.fails), len(report.warnings)
    if report.status is Status.BLOCKING:
        verdict = f"{fails} failure(s)" + (f", {warnings} warning(s)" if warnings else "") + "."
    elif report.status is Status.ADVISORY:
        verdict = f"No failures, {warnings} warning(s)."
    else:
        verdict = "All checks passed."
    lines.append(f"> {verdict}\n")

    for kind, title, icon in _SECTIONS:
        items = [a for a in report.annotations if a.kind is kind]
        if not items:
            continue
        lines.append("<table>")
        lines.append(f"<thead><tr><th></th><th>{len(items)} {title}</th></tr></thead>")
        lines.append("<tbody>")
        lines.extend(_row(icon, a) for a in items)
        lines.append("</tbody>")
        lines.append("</table>\n")

    for block in report.markdowns:
        lines.append(block.body + "\n")

    lines.append(REPORT_MARKER)
    return "\n".join(lines)


def print_report(report: RunReport) -> None:
    """Print the report to the terminal without posting to GitHub."""
    _kind_color = {Kind.FAIL: "red", Kind.WARN: "yellow", Kind.MESSAGE: "blue", Kind.MARKDOWN: "dim"}
    annotations = report.annotations
    if not annotations:
        console.print("[green]No annotations produced.[/green]")
        return
    console.print(f"\n[bold]CI report: {len(annotations)} annotation(s), status {report.status.value}[/bold]\n")
    for a in annotations:
        color = _kind_color[a.kind]
        header = f"[{color}]{a.kind.value.upper()}[/{color}]"
        if a.location:
            header += f"  [bold cyan]{a.location}[/bold cyan]"
        console.print(header)
        console.print(f"  {a.body}", markup=False)
        console.print()


def publish_report(pr, report: RunReport):
    """Post or update the report comment on the pull request."""
    body = build_report_body(report)
    comment = upsert_report_comment(pr, body)
    logger.info("Published CI report (%d annotation(s)) to PR #%s", len(report.annotations), pr.number)
    return comment
