# src/wosync/cli.py
"""wosync Command Line Interface.

Entry point for the wosync CLI tool. Each command loads settings once,
builds the engine components from them, and closes them on exit.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
import yaml
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from wosync import __version__
from wosync.clients import MirrorSyncTrigger, UpstreamClient
from wosync.contracts import (
    BatchItem,
    DirectoryUnavailable,
    UpdaterInfo,
    UpstreamError,
    WorkOrderSyncError,
)
from wosync.core.config import WorkOrderSyncSettings, load_settings, resolve_config
from wosync.core.mirror import FieldWorkerDirectory, MirrorDB, MirrorStore
from wosync.engine import (
    BatchUpdater,
    MaxRetriesExceeded,
    RetryConfig,
    RetryManager,
    SingleOrderUpdater,
    parse_integer,
)

__all__ = [
    "app",
]

DEFAULT_SETTINGS = "wosync.yaml"

app = typer.Typer(
    name="wosync",
    help="wosync: work-order status updates against the upstream system of record.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wosync version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (default: search current and parent directories).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """wosync: work-order status updates against the upstream system of record."""
    from wosync.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_settings_or_exit(settings: str) -> WorkOrderSyncSettings:
    settings_path = Path(settings).expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


@dataclass
class _Components:
    upstream: UpstreamClient
    trigger: MirrorSyncTrigger
    store: MirrorStore
    updater: SingleOrderUpdater


@contextmanager
def _components(config: WorkOrderSyncSettings) -> Iterator[_Components]:
    """Build the engine from settings and release every resource on exit."""
    db = MirrorDB.from_url(config.mirror.url)
    upstream = UpstreamClient(config.upstream)
    trigger = MirrorSyncTrigger(config.mirror_sync)
    try:
        updater = SingleOrderUpdater.from_settings(config, upstream, FieldWorkerDirectory(db), trigger)
        yield _Components(upstream=upstream, trigger=trigger, store=MirrorStore(db), updater=updater)
    finally:
        trigger.close()
        upstream.close()
        db.close()


def _resolve_id(store: MirrorStore, key: str) -> int | str:
    """Resolve a custom id through the mirror; numeric keys pass through.

    Unresolvable non-numeric keys are returned unchanged so the engine
    reports them as invalid input.
    """
    try:
        resolved = store.resolve_work_order_id(key)
    except DirectoryUnavailable as e:
        typer.secho(f"Warning: cannot resolve {key!r} via mirror store: {e}", fg=typer.colors.YELLOW, err=True)
        return key
    if resolved is None:
        return key
    return resolved


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _fail(error: WorkOrderSyncError) -> typer.Exit:
    typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    if isinstance(error, UpstreamError):
        typer.echo(f"  {error.hint}", err=True)
    return typer.Exit(1)


_SETTINGS_OPTION = typer.Option(
    DEFAULT_SETTINGS,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)


@app.command()
def update(
    work_order: str = typer.Argument(..., help="Upstream id or custom id of the work order."),
    status: str = typer.Argument(..., help="Target status id."),
    settings: str = _SETTINGS_OPTION,
    by: str | None = typer.Option(None, "--by", help="Name recorded in the description annotation."),
    no_sync: bool = typer.Option(False, "--no-sync", help="Do not trigger the mirror refresh."),
    retries: int = typer.Option(1, "--retries", min=1, help="Total attempts for transient upstream failures."),
    output_json: bool = typer.Option(False, "--json", help="Print the outcome as JSON."),
) -> None:
    """Change the status of one work order."""
    config = _load_settings_or_exit(settings)
    updater_info = UpdaterInfo(by) if by else None

    with _components(config) as parts:
        work_order_id = _resolve_id(parts.store, work_order)
        manager = RetryManager(RetryConfig(max_attempts=retries))

        def on_retry(attempt: int, error: BaseException) -> None:
            typer.echo(f"Attempt {attempt} failed ({error}); retrying...", err=True)

        try:
            outcome = manager.execute_with_retry(
                lambda: parts.updater.update_status(
                    work_order_id,
                    status,
                    updater_info,
                    suppress_mirror_sync=no_sync,
                ),
                on_retry=on_retry,
            )
        except MaxRetriesExceeded as e:
            if isinstance(e.last_error, WorkOrderSyncError):
                raise _fail(e.last_error) from None
            raise
        except WorkOrderSyncError as e:
            raise _fail(e) from None

    if output_json:
        _echo_json(outcome.to_dict())
        return

    typer.echo(f"Work order {outcome.work_order_id}: status {outcome.old_status_id} -> {outcome.new_status_id}")
    if outcome.field_worker_reassigned:
        typer.echo(
            f"  Field worker reassigned ({outcome.reassignment_reason}): "
            f"{outcome.old_field_worker_id} -> {outcome.new_field_worker_id}"
        )
    if outcome.mirror_sync is not None:
        typer.echo(f"  Mirror sync: {outcome.mirror_sync.message}")


def _read_batch_file(path: Path, default_status: str | None) -> list[tuple[str, Any]]:
    """Read ``[{id: ..., status: ...}, ...]`` from a YAML file."""
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"Error: Batch file not found: {path}", err=True)
        raise typer.Exit(1) from None
    except yaml.YAMLError as e:
        typer.echo(f"Invalid YAML in batch file {path}: {e}", err=True)
        raise typer.Exit(1) from None

    if not isinstance(loaded, list):
        typer.echo(f"Error: {path} must contain a list of {{id, status}} entries", err=True)
        raise typer.Exit(1)

    pairs: list[tuple[str, Any]] = []
    for position, entry in enumerate(loaded, start=1):
        if not isinstance(entry, dict) or "id" not in entry:
            typer.echo(f"Error: entry {position} in {path} has no 'id'", err=True)
            raise typer.Exit(1)
        entry_status = entry.get("status", default_status)
        if entry_status is None:
            typer.echo(f"Error: entry {position} in {path} has no 'status' and --status was not given", err=True)
            raise typer.Exit(1)
        pairs.append((str(entry["id"]), entry_status))
    return pairs


@app.command()
def batch(
    work_orders: list[str] | None = typer.Argument(None, help="Upstream ids or custom ids."),
    status: str | None = typer.Option(None, "--status", help="Target status for every listed work order."),
    file: Path | None = typer.Option(None, "--file", "-f", help="YAML list of {id, status} entries."),
    settings: str = _SETTINGS_OPTION,
    delay: float | None = typer.Option(None, "--delay", min=0, help="Seconds between items (default from settings)."),
    by: str | None = typer.Option(None, "--by", help="Name recorded in the description annotations."),
    output_json: bool = typer.Option(False, "--json", help="Print the ledger as JSON."),
) -> None:
    """Change the status of many work orders, one at a time."""
    pairs: list[tuple[str, Any]] = []
    if file is not None:
        pairs.extend(_read_batch_file(file, status))
    if work_orders:
        if status is None:
            typer.echo("Error: --status is required when work orders are listed on the command line", err=True)
            raise typer.Exit(1)
        pairs.extend((key, status) for key in work_orders)
    if not pairs:
        typer.echo("Error: nothing to update (pass work order ids or --file)", err=True)
        raise typer.Exit(1)

    config = _load_settings_or_exit(settings)
    updater_info = UpdaterInfo(by) if by else None

    with _components(config) as parts:
        items = [BatchItem(work_order_id=_resolve_id(parts.store, key), status_id=value) for key, value in pairs]
        runner = BatchUpdater(parts.updater, delay_seconds=config.batch.delay_seconds)

        def on_progress(done: int, total: int) -> None:
            if not output_json:
                typer.echo(f"[{done}/{total}]", err=True)

        ledger = runner.update_many(items, delay_seconds=delay, updater_info=updater_info, on_progress=on_progress)

    if output_json:
        _echo_json(
            {
                "entries": ledger.to_list(),
                "mirror_sync": None if ledger.mirror_sync is None else ledger.mirror_sync.success,
            }
        )
    else:
        for entry in ledger:
            mark = "ok" if entry.success else f"FAILED: {entry.error}"
            typer.echo(f"{entry.work_order_id}: {mark}")
        typer.echo(f"{len(ledger.succeeded)} succeeded, {len(ledger.failed)} failed")
        if ledger.mirror_sync is not None:
            typer.echo(f"Mirror sync: {ledger.mirror_sync.message}")

    if not ledger.all_succeeded:
        raise typer.Exit(1)


@app.command()
def get(
    work_order: str = typer.Argument(..., help="Upstream id or custom id of the work order."),
    settings: str = _SETTINGS_OPTION,
) -> None:
    """Print the upstream record of one work order as JSON."""
    config = _load_settings_or_exit(settings)
    with _components(config) as parts:
        try:
            work_order_id = parse_integer("work order id", _resolve_id(parts.store, work_order))
            record = parts.upstream.fetch_work_order(work_order_id)
        except WorkOrderSyncError as e:
            raise _fail(e) from None
    _echo_json(record)


@app.command()
def sync(settings: str = _SETTINGS_OPTION) -> None:
    """Ask the reconciliation pipeline to refresh the mirror."""
    config = _load_settings_or_exit(settings)
    with MirrorSyncTrigger(config.mirror_sync) as trigger:
        result = trigger.trigger_sync()
    typer.echo(result.message)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def check(settings: str = _SETTINGS_OPTION) -> None:
    """Test connectivity and credentials against the upstream service."""
    config = _load_settings_or_exit(settings)
    with UpstreamClient(config.upstream) as upstream:
        result = upstream.test_connection()
    typer.echo(result.message)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def statuses(
    settings: str = _SETTINGS_OPTION,
    incomplete: bool = typer.Option(False, "--incomplete", help="Only statuses that are not complete."),
) -> None:
    """List the status catalog from the mirror store."""
    config = _load_settings_or_exit(settings)
    with MirrorDB.from_url(config.mirror.url) as db:
        try:
            catalog = MirrorStore(db).statuses(incomplete_only=incomplete)
        except DirectoryUnavailable as e:
            raise _fail(e) from None
    for option in catalog:
        flag = "complete" if option.is_complete else "open"
        typer.echo(f"{option.id:>4}  {option.description} ({flag})")


@app.command()
def config(settings: str = _SETTINGS_OPTION) -> None:
    """Print the resolved configuration with secrets redacted."""
    loaded = _load_settings_or_exit(settings)
    _echo_json(resolve_config(loaded))
