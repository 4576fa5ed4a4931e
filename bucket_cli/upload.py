"""Upload files and folders to a bucket profile.

This is the upload pipeline behind `bucket put` and `bucket putfolder`:

1. Discover files (bucket_cli.walk), optionally filtered by extension.
2. Resolve each file's object key (bucket_cli.keys).
3. Run every task through a bounded thread pool. Each task checks whether
   the object exists (unless overriding) and uploads it otherwise.
4. Settle all: every task ends in exactly one UploadOutcome, and a failed
   task never cancels its siblings.

Progress is reported through an optional callback invoked on the calling
thread as each task finishes, so the CLI can print per-file status while the
batch is still running.

Basic Usage:
    from bucket_cli.upload import upload_folder, put_file

    results = upload_folder(adapter, profile, Path("dist/"), UploadOptions(limit=4),
                            on_progress=print_progress)
    summary = UploadSummary.from_results(results)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from bucket_cli.keys import generate_object_key, generate_object_url
from bucket_cli.models import OutcomeStatus, UploadOptions, UploadOutcome, UploadTask
from bucket_cli.profiles import Profile
from bucket_cli.storage import StorageAdapter, build_put_headers
from bucket_cli.walk import walk_files

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[UploadTask, UploadOutcome], None]

UploadResults = list[tuple[UploadTask, UploadOutcome]]


# =============================================================================
# Single Task
# =============================================================================


def upload_one(
    adapter: StorageAdapter,
    profile: Profile,
    task: UploadTask,
    options: UploadOptions,
) -> UploadOutcome:
    """Upload one file unless it already exists.

    Never raises: adapter failures are captured as FAILED outcomes.

    Args:
        adapter: Storage adapter to call.
        profile: Profile whose bucket receives the file.
        task: File and destination key.
        options: Upload options (override, cache_control).

    Returns:
        SUCCESS, EXISTS (object present and override off) or FAILED.
    """
    url = generate_object_url(profile, task.object_key)
    try:
        if not options.override and adapter.head_object(profile.bucket, task.object_key):
            return UploadOutcome.exists(url)

        headers = build_put_headers(options.cache_control)
        adapter.put_object(profile.bucket, task.object_key, task.source, headers)
    except Exception as e:
        logger.error("Upload of %s to %s failed: %s", task.source, task.object_key, e)
        return UploadOutcome.failed(url, e)

    return UploadOutcome.uploaded(url)


def put_file(
    adapter: StorageAdapter,
    profile: Profile,
    file_path: Path,
    options: UploadOptions,
) -> tuple[UploadTask, UploadOutcome]:
    """Upload a single file.

    Args:
        adapter: Storage adapter to call.
        profile: Target profile.
        file_path: Local file to upload.
        options: Upload options; object_key, when set, is used verbatim.

    Returns:
        The task and its outcome.

    Raises:
        FileNotFoundError: If file_path does not exist or is not a file.
    """
    source = file_path.resolve()
    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {file_path}")

    task = UploadTask(
        source=source,
        object_key=generate_object_key(source, profile, options),
        display_path=str(file_path),
    )
    return task, upload_one(adapter, profile, task, options)


# =============================================================================
# Folder Upload
# =============================================================================


def build_tasks(
    profile: Profile,
    root: Path,
    files: list[Path],
    options: UploadOptions,
) -> list[UploadTask]:
    """Turn discovered files into upload tasks, keeping discovery order.

    Args:
        profile: Target profile (its prefix leads every key).
        root: Folder being uploaded.
        files: Absolute paths under root.
        options: Upload options; flat drops the relative directory.

    Returns:
        One task per file.
    """
    tasks = []
    for file_path in files:
        relative = file_path.relative_to(root)
        relative_dir = "" if options.flat else relative.parent.as_posix()
        if relative_dir == ".":
            relative_dir = ""
        tasks.append(
            UploadTask(
                source=file_path,
                object_key=generate_object_key(file_path, profile, options, relative_dir),
                display_path=relative.as_posix(),
            )
        )
    return tasks


def run_tasks(
    adapter: StorageAdapter,
    profile: Profile,
    tasks: list[UploadTask],
    options: UploadOptions,
    *,
    on_progress: ProgressCallback | None = None,
) -> UploadResults:
    """Run upload tasks with at most options.limit in flight.

    Tasks are submitted in order; queued tasks start as soon as a worker
    frees up. Results are gathered on the calling thread in completion order.

    Args:
        adapter: Storage adapter to call.
        profile: Target profile.
        tasks: Tasks to run.
        options: Upload options.
        on_progress: Called once per task, on this thread, when it finishes.

    Returns:
        (task, outcome) pairs, one per task, in completion order.
    """
    results: UploadResults = []
    if not tasks:
        return results

    max_workers = max(1, options.limit)
    logger.debug("Uploading %d file(s) with %d worker(s)", len(tasks), max_workers)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_task = {
            executor.submit(upload_one, adapter, profile, task, options): task for task in tasks
        }

        for future in as_completed(future_to_task):
            task = future_to_task[future]
            try:
                outcome = future.result()
            except Exception as e:
                # upload_one captures adapter errors; this guards the settle-all contract
                url = generate_object_url(profile, task.object_key)
                outcome = UploadOutcome.failed(url, e)
            results.append((task, outcome))
            if on_progress is not None:
                on_progress(task, outcome)

    return results


def upload_folder(
    adapter: StorageAdapter,
    profile: Profile,
    root: Path,
    options: UploadOptions,
    *,
    on_progress: ProgressCallback | None = None,
) -> UploadResults:
    """Upload every file under a folder.

    Args:
        adapter: Storage adapter to call.
        profile: Target profile.
        root: Folder to upload.
        options: Upload options (limit, extensions, flat, prefix...).
        on_progress: Called once per task as it finishes.

    Returns:
        (task, outcome) pairs, one per discovered file.

    Raises:
        FolderNotFoundError: If root is missing. Raised before any upload.
        WalkError: If a directory cannot be read. Raised before any upload.
    """
    root = root.resolve()
    files = walk_files(root, options.extensions)
    tasks = build_tasks(profile, root, files, options)
    return run_tasks(adapter, profile, tasks, options, on_progress=on_progress)


def format_progress(task: UploadTask, outcome: UploadOutcome) -> str:
    """Render a one-line, human-readable status for a finished task."""
    if outcome.status is OutcomeStatus.SUCCESS:
        return f"[success] {task.display_path} ({outcome.url})"
    if outcome.status is OutcomeStatus.EXISTS:
        return f"[exists] {task.display_path} ({outcome.url})"
    return f"[failed] {task.display_path}: {outcome.error_message}"
