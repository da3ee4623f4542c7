"""purge command: delete archived screenshots for one scope."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.command("purge")
@click.option(
    "--scope",
    required=True,
    help="Scope to clear: a PR number, or the fallback scope used by local runs.",
)
@click.pass_context
def purge_cmd(ctx, scope: str):
    """Delete every archived screenshot stored under SCOPE/.

    Useful once a pull request is merged or closed, since its screenshots
    are otherwise only replaced by the next run on the same PR.
    """
    store_factory = ctx.obj.get("store_factory")
    if store_factory is None:
        raise click.UsageError("AWS_ENDPOINT, AWS_ACCESS_KEY_ID and AWS_SECRET_KEY must all be set to purge.")

    scope = scope.strip("/")
    if not scope:
        raise click.UsageError("--scope must not be empty.")
    prefix = f"{scope}/"
    try:
        store = store_factory()
    except Exception as e:
        raise click.ClickException(f"Could not create storage client: {e}")

    try:
        removed = store.purge(prefix)
    except Exception as e:
        raise click.ClickException(f"Could not purge {prefix}: {e}")
    finally:
        store.close()

    if removed:
        console.print(f"[green]Deleted {removed} archived screenshot(s) under {prefix}[/green]")
    else:
        console.print(f"[yellow]Nothing archived under {prefix}[/yellow]")
