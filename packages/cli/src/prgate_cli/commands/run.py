"""run command: annotate a pull request with CI results."""

from __future__ import annotations

import logging

import click
from github import GithubException
from rich.console import Console

from prgate_core.annotations import Status
from prgate_core.gh.pull_request import (
    detect_pr_number,
    get_local_modified_files,
    get_modified_files,
    get_pull,
    get_repo,
)
from prgate_core.runner import ReviewContext, print_report, publish_report, run_checks

console = Console()
logger = logging.getLogger(__name__)


@click.command("run")
@click.option(
    "--repo",
    default=None,
    envvar="GITHUB_REPOSITORY",
    help="GitHub repository in owner/name format. Omit for a local run.",
)
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the one in GITHUB_REF.",
)
@click.option(
    "--project-root",
    "project_root",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory the CI artifacts are read from. Overrides config file.",
)
@click.option(
    "--base-ref",
    "base_ref",
    default="origin/master",
    show_default=True,
    help="Git ref local runs compare against to find modified files.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the report without posting to GitHub.",
)
@click.option(
    "--fail-on-blocking",
    "fail_on_blocking",
    is_flag=True,
    help="Exit with status 1 when any blocking annotation is produced.",
)
@click.pass_context
def run_cmd(
    ctx,
    repo: str | None,
    pr_number: int | None,
    project_root: str | None,
    base_ref: str,
    shadow: bool,
    fail_on_blocking: bool,
):
    """Read CI artifacts and annotate the pull request.

    Reads the lint report, Jest results and coverage summary, archives failed
    screenshot diffs to object storage and posts one report comment on the PR.
    Without a repository and PR number the run is local: modified files come
    from git and the report is printed instead of posted.

    \b
    Environment variables:
      GITHUB_TOKEN         GitHub token (or DANGER_GITHUB_API_TOKEN, or gh CLI)
      AWS_ENDPOINT         Object storage endpoint
      AWS_ACCESS_KEY_ID    Object storage access key
      AWS_SECRET_KEY       Object storage secret key
    Screenshot archiving is skipped unless all three AWS_* variables are set.
    """
    config = dict(ctx.obj["config"])
    if project_root is not None:
        config["project_root"] = project_root
    store_factory = ctx.obj.get("store_factory")

    if pr_number is None:
        pr_number = detect_pr_number()

    this_pr = None
    if repo and pr_number is not None:
        token = config.get("github_token")
        if not token:
            raise click.UsageError(
                "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
                "Use --shadow without --repo for a local run."
            )
        try:
            this_pr = get_pull(get_repo(repo, token=token), pr_number)
            modified_files = get_modified_files(this_pr)
        except GithubException as e:
            raise click.ClickException(f"Could not load PR #{pr_number} from {repo}: {e}")
        console.print(f"[cyan]Checking {repo}#{pr_number} ({len(modified_files)} modified file(s))[/cyan]")
    else:
        modified_files = get_local_modified_files(base_ref)
        console.print(f"[cyan]Local run against {base_ref} ({len(modified_files)} modified file(s))[/cyan]")

    report = run_checks(config, ReviewContext(pr_number=pr_number, modified_files=modified_files), store_factory)

    if this_pr is not None and not shadow:
        try:
            publish_report(this_pr, report)
            console.print(f"\n[green]Report posted to PR #{pr_number}: {report.status.value}.[/green]")
        except GithubException as e:
            logger.error("Could not publish report to PR #%s: %s", pr_number, e)
            console.print(f"[red]Could not post report to GitHub: {e}[/red]")
            print_report(report)
    else:
        print_report(report)

    if fail_on_blocking and report.status is Status.BLOCKING:
        ctx.exit(1)
