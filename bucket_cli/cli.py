"""bucket CLI - manage bucket profiles and upload files and folders to them.

The CLI is a thin wrapper around the library modules (profiles, upload).
All business logic lives in the library; the CLI handles user interaction.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.console import Console

from bucket_cli.config import get_config_path
from bucket_cli.errors import BucketError, FolderNotFoundError
from bucket_cli.json_output import ErrorDetail, error_envelope, success_envelope
from bucket_cli.models import (
    DEFAULT_LIMIT,
    OutcomeStatus,
    UploadOptions,
    UploadOutcome,
    UploadSummary,
    UploadTask,
)
from bucket_cli.output import detail, error, info, print_profiles_table, success, warn
from bucket_cli.profiles import JsonFileProfileStore, Profile, ProfileStore
from bucket_cli.storage import ObstoreAdapter, StorageAdapter
from bucket_cli.upload import format_progress, put_file, upload_folder
from bucket_cli.walk import parse_extensions

AdapterFactory = Callable[[Profile], StorageAdapter]

_URL_PATTERN = re.compile(
    r"[-a-zA-Z0-9@:%._\\+~#=]{2,256}\.[a-z]{2,6}\b([-a-zA-Z0-9@:%_\\+.~#?&/=]*)"
)


# =============================================================================
# Parameter Types
# =============================================================================


class RequiredText(click.ParamType):
    """Non-empty text, stripped of surrounding whitespace."""

    name = "text"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> str:
        text = str(value).strip()
        if not text:
            self.fail("a value is required", param, ctx)
        return text


class UrlText(click.ParamType):
    """A host or endpoint URL; trailing slashes are dropped.

    Values without a scheme get https:// so they can be used to build URLs.

    Args:
        optional: Accept an empty value (returned as "").
    """

    name = "url"

    def __init__(self, *, optional: bool = False) -> None:
        self.optional = optional

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> str:
        text = str(value).strip().rstrip("/")
        if not text:
            if self.optional:
                return ""
            self.fail("a URL is required", param, ctx)
        if not _URL_PATTERN.search(text):
            self.fail(f"'{text}' is not a valid URL", param, ctx)
        if not re.match(r"^https?://", text):
            text = f"https://{text}"
        return text


# =============================================================================
# Context Helpers
# =============================================================================


def should_output_json(ctx: click.Context) -> bool:
    """Check the global --format option."""
    obj = ctx.find_root().obj or {}
    return bool(obj.get("format", "text") == "json")


def output_json_envelope(envelope: Any) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


def get_store(ctx: click.Context) -> ProfileStore:
    """Return the profile store for this invocation.

    A store placed in ctx.obj["store"] (e.g. by tests) takes precedence over
    the JSON config file.
    """
    obj = ctx.find_root().obj
    store = obj.get("store")
    if store is None:
        store = JsonFileProfileStore(obj["config_path"])
        obj["store"] = store
    return store  # type: ignore[no-any-return]


def get_adapter(ctx: click.Context, profile: Profile) -> StorageAdapter:
    """Build the storage adapter for a profile (overridable via ctx.obj)."""
    obj = ctx.find_root().obj
    factory: AdapterFactory = obj.get("adapter_factory", ObstoreAdapter.from_profile)
    return factory(profile)


def report_error(ctx: click.Context, command: str, err: Exception) -> None:
    """Print an error as text or as a JSON error envelope."""
    if should_output_json(ctx):
        output_json_envelope(error_envelope(command, [ErrorDetail.from_exception(err)]))
    elif isinstance(err, BucketError):
        error(err.message)
    else:
        error(str(err))


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


# =============================================================================
# Command Group
# =============================================================================


@click.group()
@click.version_option()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use (default: $BUCKET_CLI_CONFIG or ~/.bucketrc).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug details to stderr.")
@click.pass_context
def cli(ctx: click.Context, output_format: str, config_path: Path | None, verbose: bool) -> None:
    """bucket - manage bucket profiles and upload files to object storage."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format
    ctx.obj["config_path"] = get_config_path(config_path)


# =============================================================================
# Profile Commands
# =============================================================================


@cli.command("ls")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """List all bucket profiles."""
    use_json = should_output_json(ctx)

    try:
        store = get_store(ctx)
        profiles = store.list_profiles()
        current = store.current()
    except BucketError as err:
        report_error(ctx, "ls", err)
        raise SystemExit(1) from err

    if use_json:
        data = {
            "current": current,
            "profiles": [p.redacted() for p in profiles],
            "count": len(profiles),
        }
        output_json_envelope(success_envelope("ls", data))
    elif not profiles:
        info("No profiles configured, add one with 'bucket add'")
    else:
        print_profiles_table(profiles, current=current)


@cli.command("show")
@click.argument("name")
@click.pass_context
def show_command(ctx: click.Context, name: str) -> None:
    """Show details of the bucket profile NAME."""
    try:
        store = get_store(ctx)
        profile = store.get_profile(name)
        current = store.current()
    except BucketError as err:
        report_error(ctx, "show", err)
        raise SystemExit(1) from err

    fields = profile.redacted()
    if should_output_json(ctx):
        data: dict[str, Any] = {**fields, "current": profile.name == current}
        output_json_envelope(success_envelope("show", data))
        return

    info(f"Profile: {profile.name}" + (" (current)" if profile.name == current else ""))
    for key, value in fields.items():
        if key != "name":
            detail(f"  {key}: {value}")


@cli.command("config")
@click.argument("name")
@click.option("--host", "-h", type=UrlText(optional=True), default=None, help="Public host.")
@click.option("--prefix", "-p", default=None, help="Object key prefix.")
@click.option("--bucket", "-b", default=None, help="Bucket name.")
@click.option("--endpoint", "-e", type=UrlText(), default=None, help="Service endpoint.")
@click.option("--ak", "-a", default=None, help="Access key.")
@click.option("--sk", "-s", default=None, help="Secret key.")
@click.pass_context
def config_command(
    ctx: click.Context,
    name: str,
    host: str | None,
    prefix: str | None,
    bucket: str | None,
    endpoint: str | None,
    ak: str | None,
    sk: str | None,
) -> None:
    """Edit the bucket profile NAME.

    Only the options given are changed.

    Examples:

        bucket config prod --prefix static/ --host https://cdn.example.com
    """
    changes = {
        "host": host,
        "prefix": prefix.strip() if prefix else prefix,
        "bucket": bucket.strip() if bucket else bucket,
        "endpoint": endpoint,
        "access_key": ak.strip() if ak else ak,
        "secret_key": sk.strip() if sk else sk,
    }
    if not any(changes.values()):
        warn(f"Nothing to change for {name}, pass at least one option")
        return

    try:
        profile = get_store(ctx).update_profile(name, **changes)
    except BucketError as err:
        report_error(ctx, "config", err)
        raise SystemExit(1) from err

    changed = sorted(k for k, v in changes.items() if v)
    if should_output_json(ctx):
        output_json_envelope(
            success_envelope("config", {"profile": profile.redacted(), "changed": changed})
        )
    else:
        success(f"Updated {name}: {', '.join(changed)}")


@cli.command("add")
@click.option("--name", prompt="* name", type=RequiredText(), help="Profile name.")
@click.option("--bucket", prompt="* bucket", type=RequiredText(), help="Bucket name.")
@click.option(
    "--host",
    prompt="host",
    type=UrlText(optional=True),
    default="",
    show_default=False,
    help="Public host used in printed URLs.",
)
@click.option(
    "--prefix", prompt="prefix", default="", show_default=False, help="Object key prefix."
)
@click.option("--endpoint", prompt="* endpoint", type=UrlText(), help="Service endpoint.")
@click.option("--ak", prompt="* ak", type=RequiredText(), help="Access key.")
@click.option("--sk", prompt="* sk", type=RequiredText(), hide_input=True, help="Secret key.")
@click.pass_context
def add_command(
    ctx: click.Context,
    name: str,
    bucket: str,
    host: str,
    prefix: str,
    endpoint: str,
    ak: str,
    sk: str,
) -> None:
    """Add a bucket profile (prompts for anything not given as an option)."""
    profile = Profile(
        name=name,
        bucket=bucket,
        host=host,
        prefix=prefix.strip(),
        endpoint=endpoint,
        access_key=ak,
        secret_key=sk,
    )

    try:
        get_store(ctx).add_profile(profile)
    except BucketError as err:
        report_error(ctx, "add", err)
        raise SystemExit(1) from err

    if should_output_json(ctx):
        output_json_envelope(success_envelope("add", {"profile": profile.redacted()}))
    else:
        success(f"Added bucket profile [{name}]")


@cli.command("use")
@click.argument("name")
@click.pass_context
def use_command(ctx: click.Context, name: str) -> None:
    """Make NAME the current bucket profile."""
    try:
        get_store(ctx).set_current(name)
    except BucketError as err:
        report_error(ctx, "use", err)
        raise SystemExit(1) from err

    if should_output_json(ctx):
        output_json_envelope(success_envelope("use", {"current": name}))
    else:
        success(f"Bucket has been set to {name}")


@cli.command("remove")
@click.argument("name")
@click.pass_context
def remove_command(ctx: click.Context, name: str) -> None:
    """Delete the bucket profile NAME."""
    try:
        get_store(ctx).remove_profile(name)
    except BucketError as err:
        report_error(ctx, "remove", err)
        raise SystemExit(1) from err

    if should_output_json(ctx):
        output_json_envelope(success_envelope("remove", {"removed": name}))
    else:
        success(f"Removed {name}")


# =============================================================================
# Upload Commands
# =============================================================================


def _upload_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by put and putfolder."""
    decorators = [
        click.option("--bucket", "-b", default=None, help="Profile to use (default: current)."),
        click.option("--prefix", "-p", default="", help="Key prefix after the profile prefix."),
        click.option("--cache", "-c", default=None, help="Cache-Control header."),
        click.option(
            "--md5/--no-md5",
            "hashed_name",
            default=True,
            help="Name objects by md5 of name and time (default) or keep the file name.",
        ),
        click.option("--override", "-o", is_flag=True, help="Overwrite existing objects."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@cli.command("put")
@click.argument("file", type=click.Path(path_type=Path))
@_upload_options
@click.option("--object-key", "-k", default=None, help="Exact object key to upload to.")
@click.pass_context
def put_command(
    ctx: click.Context,
    file: Path,
    bucket: str | None,
    prefix: str,
    cache: str | None,
    hashed_name: bool,
    override: bool,
    object_key: str | None,
) -> None:
    """Upload FILE to a bucket.

    Examples:

        bucket put logo.png --no-md5 -p img

        bucket put build.zip -b releases -k latest/build.zip -o
    """
    use_json = should_output_json(ctx)
    options = UploadOptions(
        target_bucket=bucket,
        prefix=prefix,
        object_key=object_key or None,
        cache_control=cache or None,
        override=override,
        hashed_name=hashed_name,
    )

    try:
        profile = get_store(ctx).get_profile(options.target_bucket)
        adapter = get_adapter(ctx, profile)
        if use_json:
            task, outcome = put_file(adapter, profile, file, options)
        else:
            with Console(stderr=True).status(f"Uploading {file}"):
                task, outcome = put_file(adapter, profile, file, options)
    except (BucketError, FileNotFoundError) as err:
        report_error(ctx, "put", err)
        raise SystemExit(1) from err

    data = {"file": str(file), "object_key": task.object_key, **outcome.to_dict()}
    if use_json:
        if outcome.status is OutcomeStatus.FAILED:
            errors = [ErrorDetail.from_exception(outcome.error)] if outcome.error else []
            output_json_envelope(error_envelope("put", errors, data=data))
        else:
            output_json_envelope(success_envelope("put", data))
    elif outcome.status is OutcomeStatus.SUCCESS:
        success(f"[success] {outcome.url}")
    elif outcome.status is OutcomeStatus.EXISTS:
        warn(f"[exists] {outcome.url} already exists.")
        warn("Use -o to override.")
    else:
        error(f"[failed] {outcome.url}: {outcome.error_message}")

    if outcome.status is OutcomeStatus.FAILED:
        raise SystemExit(1)


@cli.command("putfolder")
@click.argument("directory", metavar="DIR", type=click.Path(path_type=Path))
@_upload_options
@click.option(
    "--limit",
    "-l",
    type=click.IntRange(min=1),
    default=DEFAULT_LIMIT,
    show_default=True,
    help="Max number of files uploaded at once.",
)
@click.option("--ext", "-e", default=None, help="Only upload these extensions, e.g. png,jpg.")
@click.option("--flat", "-f", is_flag=True, help="Upload every file directly under the prefix.")
@click.pass_context
def putfolder_command(
    ctx: click.Context,
    directory: Path,
    bucket: str | None,
    prefix: str,
    cache: str | None,
    hashed_name: bool,
    override: bool,
    limit: int,
    ext: str | None,
    flat: bool,
) -> None:
    """Upload every file under DIR to a bucket.

    Files that fail are reported and the rest keep uploading; the command
    still exits 0. Missing folders or profiles exit 1 before any upload.

    Examples:

        bucket putfolder dist -p static --no-md5

        bucket putfolder photos -e jpg,png -l 4 -f
    """
    use_json = should_output_json(ctx)
    options = UploadOptions(
        target_bucket=bucket,
        prefix=prefix,
        limit=limit,
        extensions=parse_extensions(ext),
        flat=flat,
        cache_control=cache or None,
        override=override,
        hashed_name=hashed_name,
    )

    def on_progress(task: UploadTask, outcome: UploadOutcome) -> None:
        line = format_progress(task, outcome)
        if outcome.status is OutcomeStatus.SUCCESS:
            success(line)
        elif outcome.status is OutcomeStatus.EXISTS:
            warn(line)
        else:
            error(line)

    try:
        root = directory.resolve()
        if not root.is_dir():
            raise FolderNotFoundError(str(root))
        profile = get_store(ctx).get_profile(options.target_bucket)
        adapter = get_adapter(ctx, profile)
        if not use_json:
            info(f"Uploading {root} to {profile.bucket} ({options.limit} at a time)")
        results = upload_folder(
            adapter, profile, root, options, on_progress=None if use_json else on_progress
        )
    except BucketError as err:
        report_error(ctx, "putfolder", err)
        raise SystemExit(1) from err

    summary = UploadSummary.from_results(results)

    if use_json:
        data = {
            "folder": str(root),
            "summary": summary.to_dict(),
            "files": [
                {"path": task.display_path, "object_key": task.object_key, **outcome.to_dict()}
                for task, outcome in results
            ],
        }
        failures = [
            ErrorDetail(
                type="UploadFailed",
                message=f"{task.display_path}: {outcome.error_message}",
                code=outcome.error.code if isinstance(outcome.error, BucketError) else None,
            )
            for task, outcome in results
            if outcome.status is OutcomeStatus.FAILED
        ]
        if failures:
            output_json_envelope(error_envelope("putfolder", failures, data=data))
        else:
            output_json_envelope(success_envelope("putfolder", data))
        return

    if summary.total == 0:
        info(f"No files found in {root}")
        return

    message = (
        f"{summary.uploaded} uploaded, {summary.skipped} skipped, "
        f"{summary.failed} failed ({summary.total} total)"
    )
    if summary.failed:
        warn(message)
    else:
        success(message)
