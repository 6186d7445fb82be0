"""CLI module for snapshot export and restore.

Usage:
    DB_PROFILE=local db-snapshot export
    db-snapshot --profile remote export --output backups/remote.json
    db-snapshot restore backups/backup-2026-01-15-093000.json
    db-snapshot restore backups/backup-2026-01-15-093000.json --yes
    db-snapshot validate backups/backup-2026-01-15-093000.json
    db-snapshot list
    db-snapshot profiles

Commands:
    export    - Export every catalog table to a snapshot file
    restore   - Replace the database contents with a snapshot
    validate  - Check a snapshot file without touching the database
    list      - List snapshot files in the backups directory
    profiles  - List available profiles
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from db_snapshot.catalog.contacts import CONTACTS_CATALOG
from db_snapshot.catalog.models import TableCatalog
from db_snapshot.config.loader import load_config
from db_snapshot.config.models import SnapshotConfig
from db_snapshot.factory import ProfileNotFoundError, get_store
from db_snapshot.transfer.exporter import export_snapshot
from db_snapshot.transfer.progress import ProgressEvent
from db_snapshot.transfer.restore import SnapshotRestorer
from db_snapshot.transfer.snapshot import (
    SnapshotValidationError,
    list_snapshots,
    load_snapshot_document,
    save_snapshot,
    validate_snapshot,
)

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config) if getattr(args, "config", None) else None


def _load_config_or_default(args: argparse.Namespace) -> SnapshotConfig:
    """Load the config file, or defaults when there is none."""
    try:
        return load_config(_config_path(args))
    except FileNotFoundError:
        return SnapshotConfig()


def _catalog(config: SnapshotConfig) -> TableCatalog:
    return config.catalog or CONTACTS_CATALOG


class _ProgressRenderer:
    """Maps progress events onto one rich progress task per phase."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._tasks: dict[str, TaskID] = {}

    def __call__(self, event: ProgressEvent) -> None:
        task = self._tasks.get(event.phase)
        if task is None:
            task = self._progress.add_task(event.phase, total=event.total)
            self._tasks[event.phase] = task
        self._progress.update(
            task,
            advance=1,
            description=f"{event.phase} [cyan]{event.table}[/cyan]",
        )


def _progress_bar() -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
    )


def _print_report(report: dict) -> None:
    for error in report["errors"]:
        console.print(f"  [red]x[/red] {error}")
    for warning in report["warnings"]:
        console.print(f"  [yellow]![/yellow] {warning}")


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_export(args: argparse.Namespace) -> int:
    """Async implementation for export command.

    Returns:
        0 on success, 1 on configuration or connection failure.
    """
    config = _load_config_or_default(args)
    try:
        store = await get_store(
            profile_name=args.profile,
            env_prefix=args.env_prefix,
            config_path=_config_path(args),
        )
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    try:
        with _progress_bar() as progress:
            snapshot = await export_snapshot(
                store, _catalog(config), on_progress=_ProgressRenderer(progress)
            )
    finally:
        await store.close()

    path = save_snapshot(
        snapshot,
        output_path=args.output,
        backups_dir=config.settings.backups_dir,
    )

    table = Table(title="Exported", show_header=True, header_style="bold")
    table.add_column("Table", style="dim")
    table.add_column("Rows", justify="right")
    for name, count in snapshot.counts().items():
        table.add_row(name, str(count))
    console.print(table)
    console.print(f"[bold green]v[/bold green] Snapshot written to [cyan]{path}[/cyan]")
    return 0


async def _async_restore(args: argparse.Namespace) -> int:
    """Async implementation for restore command.

    Returns:
        0 on success, 1 on rejection, cancellation or fatal error.
    """
    config = _load_config_or_default(args)
    catalog = _catalog(config)

    try:
        document = load_snapshot_document(args.snapshot_path)
    except SnapshotValidationError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    # Pre-flight check before asking for confirmation
    report = validate_snapshot(document, catalog)
    if not report["valid"]:
        console.print("[bold red]x[/bold red] Snapshot is invalid")
        _print_report(report)
        return 1

    if not args.yes:
        console.print(f"This will [bold]replace all data[/bold] with: {args.snapshot_path}")
        console.print(
            "[yellow]A failure midway leaves the database partially restored.[/yellow]"
        )
        if not Confirm.ask("Continue?", console=console, default=False):
            console.print("[dim]Restore cancelled.[/dim]")
            return 1

    try:
        store = await get_store(
            profile_name=args.profile,
            env_prefix=args.env_prefix,
            config_path=_config_path(args),
        )
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    progress = _progress_bar()
    restorer = SnapshotRestorer(
        store,
        catalog,
        on_progress=_ProgressRenderer(progress),
        chunk_size=config.settings.chunk_size,
    )
    try:
        with progress:
            summary = await restorer.run(document)
    except SnapshotValidationError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1
    except Exception as e:
        console.print(f"[bold red]x[/bold red] Restore failed: {e}")
        console.print(
            "[yellow]The database is partially restored. "
            "Re-run the restore once the cause is fixed.[/yellow]"
        )
        return 1
    finally:
        await store.close()

    total_rows = sum(summary.inserted.values())
    restored = sum(summary.self_references_restored.values())
    console.print(
        f"[bold green]v[/bold green] Restored {total_rows} rows "
        f"({restored} self-references)"
    )
    return 0


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_export(args: argparse.Namespace) -> int:
    """Export the active profile to a snapshot file."""
    return asyncio.run(_async_export(args))


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore a snapshot file into the active profile."""
    return asyncio.run(_async_restore(args))


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a snapshot file.

    Reads only local files -- no database calls.

    Returns:
        0 if valid (warnings allowed), 1 otherwise.
    """
    config = _load_config_or_default(args)
    console.print(f"Validating: [cyan]{args.snapshot_path}[/cyan]")

    try:
        document = load_snapshot_document(args.snapshot_path)
    except SnapshotValidationError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    report = validate_snapshot(document, _catalog(config))
    _print_report(report)

    if report["valid"]:
        suffix = " (with warnings)" if report["warnings"] else ""
        console.print(f"[bold green]v[/bold green] Snapshot is valid{suffix}")
        return 0
    console.print("[bold red]x[/bold red] Snapshot is invalid")
    return 1


def cmd_list(args: argparse.Namespace) -> int:
    """List snapshot files in the configured backups directory."""
    config = _load_config_or_default(args)
    files = list_snapshots(config.settings.backups_dir)

    if not files:
        console.print(
            f"[yellow]No snapshots in {config.settings.backups_dir}/[/yellow]"
        )
        return 0

    table = Table(title="Snapshots", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Modified")
    table.add_column("Size", justify="right")
    for f in files:
        table.add_row(f.name, f.modified_at.strftime("%Y-%m-%d %H:%M:%S"), f"{f.size:,}")
    console.print(table)
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db-snapshot.toml.

    Returns:
        0 on success, 1 if the config file is not found.
    """
    try:
        config = load_config(_config_path(args))
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    default = config.settings.default_profile

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == default else " "
        table.add_row(marker, name, profile.description or "")

    console.print(table)
    if default:
        console.print("\n[bold green]*[/bold green] = default profile")
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main() -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="db-snapshot",
        description="Relational snapshot export and restore",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (default: ./db-snapshot.toml)",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="Profile name from the config file",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_export = subparsers.add_parser("export", help="Export database to a snapshot file")
    p_export.add_argument(
        "--output",
        "-o",
        default=None,
        help="Output file path (default: <backups_dir>/backup-{timestamp}.json)",
    )
    p_export.set_defaults(func=cmd_export)

    p_restore = subparsers.add_parser("restore", help="Restore a snapshot file")
    p_restore.add_argument("snapshot_path", help="Path to snapshot JSON file")
    p_restore.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    p_restore.set_defaults(func=cmd_restore)

    p_validate = subparsers.add_parser("validate", help="Validate a snapshot file")
    p_validate.add_argument("snapshot_path", help="Path to snapshot JSON file")
    p_validate.set_defaults(func=cmd_validate)

    p_list = subparsers.add_parser("list", help="List snapshot files")
    p_list.set_defaults(func=cmd_list)

    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    args = parser.parse_args()
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
