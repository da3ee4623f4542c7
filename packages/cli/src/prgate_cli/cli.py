"""CLI entry point for prgate.

Commands:
  run    read CI artifacts, archive screenshot diffs, annotate the pull request
  purge  delete archived screenshots for a scope (e.g. after a PR merges)
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prgate_cli.commands.purge import purge_cmd
from prgate_cli.commands.run import run_cmd

console = Console()


def _build_store_factory(config: dict):
    """Return a callable that builds the configured object store, or None.

    None means storage credentials are not configured and screenshot
    archiving is skipped. The store itself is built lazily by the archiver so
    that client construction errors surface as PR annotations.

    This factory lives in cli.py so neither prgate_core nor prgate_storage
    know about each other.
    """
    from prgate_storage.models import StorageCredentials

    credentials = StorageCredentials.from_config(config)
    if credentials is None:
        return None

    bucket = config["bucket"]

    def factory():
        from prgate_storage.s3 import S3ObjectStore

        return S3ObjectStore(credentials, bucket=bucket)

    return factory


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # boto3/botocore are very chatty at DEBUG.
    for name in ("botocore", "boto3", "urllib3", "s3transfer"):
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prgate"),
    prog_name="prgate",
)
@click.option(
    "--config",
    "config_path",
    default=".prgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRGATE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Annotate GitHub pull requests with lint, test, coverage and screenshot results."""
    from prgate_core.config import load_config
    from prgate_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config
    ctx.obj["store_factory"] = _build_store_factory(config)


main.add_command(run_cmd)
main.add_command(purge_cmd)
