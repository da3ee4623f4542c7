"""Screenshot diff reconciliation and archiving.

A visual-regression run leaves one PNG per failed screenshot in diff_dir.
This module flags them on the PR and, when storage is configured, mirrors
them to object storage so reviewers can see the diffs inline:

    purge {scope}/  ->  upload {scope}/{name}-{md5}.png  (one per image)

The purge finishes before the first upload starts. Otherwise a purge meant
for the previous run's objects could delete a key the current run has just
written. Keys depend only on scope, name and content, so re-running with the
same diffs rewrites the same keys.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from prgate_core.annotations import CheckResult
from prgate_core.config import resolve_path

if TYPE_CHECKING:
    from prgate_storage.base import BaseObjectStore

logger = logging.getLogger(__name__)

PNG_CONTENT_TYPE = "image/png"

StoreFactory = Callable[[], "BaseObjectStore"]


def list_diff_images(diff_dir: Path) -> list[Path]:
    """Return the diff images in diff_dir sorted by name; a missing dir has none."""
    if not diff_dir.is_dir():
        return []
    return sorted((p for p in diff_dir.iterdir() if p.is_file()), key=lambda p: p.name)


def run_scope(pr_number: Optional[int], fallback: str) -> str:
    # Every run without a PR number shares the fallback scope.
    return str(pr_number) if pr_number is not None else fallback


def content_hash(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def object_key(scope: str, name: str, digest: str) -> str:
    return f"{scope}/{name}-{digest}.png"


def screenshot_markup(name: str, url: str) -> str:
    return (
        "<details>"
        f"<summary>Screenshot <code>{name}</code> failed</summary>"
        f'<img src="{url}">'
        "</details>"
    )


def changed_screenshots_warning(count: int, update_url: Optional[str]) -> str:
    if update_url:
        how = f'review & update them via ["Update Screenshots" action]({update_url})'
    else:
        how = "review & update them"
    return f"{count} changed screenshots found: {how} before merging."


def _upload_one(store: BaseObjectStore, scope: str, image: Path):
    """Upload a single diff image. Returns (name, stored_object, error)."""
    name = image.stem
    try:
        body = image.read_bytes()
        key = object_key(scope, name, content_hash(body))
        stored = store.put_object(key, body, PNG_CONTENT_TYPE)
    except Exception as e:
        logger.warning("Upload of %s failed: %s", image.name, e)
        return name, None, e
    logger.debug("Uploaded %s to %s", image.name, stored.key)
    return name, stored, None


async def archive_screenshots(
    config: dict,
    pr_number: Optional[int],
    store_factory: Optional[StoreFactory] = None,
) -> CheckResult:
    """Flag changed screenshots and mirror them to object storage.

    ``store_factory`` is None when storage credentials are not configured; in
    that case only the local warning is produced and no storage call is made.
    """
    result = CheckResult("screenshots")
    diff_dir = resolve_path(config, "diff_dir")
    images = await asyncio.to_thread(list_diff_images, diff_dir)

    if images:
        result.warn(changed_screenshots_warning(len(images), config.get("update_screenshots_url")))

    if store_factory is None:
        logger.info("Storage credentials missing - skipping screenshot archiving.")
        return result

    # No diff dir means no visual run happened here; leave the archive alone.
    # An existing empty dir still purges so the archive mirrors a clean run.
    if not diff_dir.is_dir():
        logger.info("No screenshot diff directory at %s - skipping screenshot archiving.", diff_dir)
        return result

    try:
        store = store_factory()
    except Exception as e:
        logger.warning("Could not create storage client: %s", e)
        result.warn("Could not create storage client - aborting screenshot reporting.")
        return result

    scope = run_scope(pr_number, config.get("fallback_scope", "local"))
    try:
        try:
            removed = await asyncio.to_thread(store.purge, f"{scope}/")
            logger.info("Purged %d archived screenshot(s) under %s/", removed, scope)
        except Exception as e:
            logger.warning("Could not purge old screenshots under %s/: %s", scope, e)
            result.warn(f'Could not purge old screenshots: "{e}"')

        sem = asyncio.Semaphore(max(1, int(config.get("max_parallel_uploads", 4))))

        async def _guarded_upload(image: Path):
            async with sem:
                return await asyncio.to_thread(_upload_one, store, scope, image)

        outcomes = await asyncio.gather(*(_guarded_upload(image) for image in images))
    finally:
        store.close()

    for name, stored, error in outcomes:
        if error is not None:
            result.warn(f"Could not upload screenshot diff {name}: {error}")
        else:
            result.markdown(screenshot_markup(name, stored.url))
    return result
