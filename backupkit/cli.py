"""
Backup Kit - CLI Interface.

A command-line interface for running file backups described by a YAML
configuration file. Three backup modes are supported: copy (additive mirror),
sync (mirror with deletion) and isolated (dated snapshots with retention).

Usage Examples:
    # Create a default configuration to edit
    backupkit create nightly

    # Run the backup described by nightly.yaml
    backupkit run nightly

    # Run with a log file and per-directory progress
    backupkit run nightly --log-file nightly.log --verbose
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from backupkit.config import create_default_config, load_settings, resolve_config_path
from backupkit.log_sink import combine_sinks, logging_sink
from backupkit.models import BackupSettings, BackupSummary
from backupkit.orchestration import BackupLogger, BackupRunner
from backupkit.scanning import BackupAbortedError
from backupkit.ui import BackupConsole

__version__ = "1.0.0"

# Initialize Typer app
app = typer.Typer(
    name="backupkit",
    help="Backup Kit - Copy, synchronize or snapshot directories into a backup target.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"Backup Kit v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send DEBUG records of the backupkit logger to stderr when verbose."""
    if not verbose:
        return
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("backupkit").setLevel(logging.DEBUG)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Backup Kit - Copy, synchronize or snapshot directories into a backup target."""
    pass


@app.command()
def create(
    config: str = typer.Argument(
        ...,
        help="Name or path of the configuration file to create (.yaml is appended if missing).",
    ),
) -> None:
    """
    Create a default configuration file.

    The file is written with placeholder directories and must be edited
    before it can be run.
    """
    config_path = resolve_config_path(config)

    try:
        create_default_config(config_path)
    except FileExistsError:
        console.print(f"[red]Error:[/red] Config file already exists: {config_path}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot create config file: {e}")
        raise typer.Exit(1)

    console.print(f"Created config file: {config_path}")
    console.print("[dim]Edit target_dir and source_dirs before running it.[/dim]")


@app.command()
def run(
    config: str = typer.Argument(
        ...,
        help="Name or path of the configuration file (.yaml is appended if missing).",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    no_retry: bool = typer.Option(
        False,
        "--no-retry",
        help="Do not re-attempt files that were busy or failed.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Run the backup described by a configuration file.

    Exits with 0 when every eligible file was backed up, 1 when some files
    could not be backed up or the run failed, and 130 when interrupted.
    """
    configure_logging(verbose)
    config_path = resolve_config_path(config)

    try:
        settings = load_settings(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print(f"[dim]Tip: Use 'backupkit create {config}' to create it.[/dim]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if no_retry:
        settings = replace(settings, retry_enabled=False)

    backup_console = BackupConsole(console, verbose=verbose)

    logger_instance: Optional[BackupLogger] = None
    if log_file:
        try:
            logger_instance = BackupLogger(log_file, backup_mode=settings.backup_mode)
        except OSError as e:
            console.print(f"[red]Error:[/red] Failed to create log file: {e}")
            raise typer.Exit(1)

    try:
        if logger_instance:
            with logger_instance:
                logger_instance.log_header()
                summary = _run_backup(settings, backup_console, logger_instance, verbose)
            console.print(f"[dim]Log written to: {logger_instance.get_log_path()}[/dim]")
        else:
            summary = _run_backup(settings, backup_console, None, verbose)

    except KeyboardInterrupt:
        console.print("\n[yellow]Backup interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except BackupAbortedError as e:
        backup_console.display_error(str(e))
        raise typer.Exit(1)

    except (ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not summary.completed_without_error:
        console.print(
            f"\n[yellow]Completed with {summary.error_count} file(s) not backed up.[/yellow]"
        )
        raise typer.Exit(1)


def _run_backup(
    settings: BackupSettings,
    backup_console: BackupConsole,
    logger_instance: Optional[BackupLogger],
    verbose: bool,
) -> BackupSummary:
    """Run one backup, sending events to the console and the optional log file."""
    sinks = [backup_console.log]
    if verbose:
        sinks.append(logging_sink)
    if logger_instance:
        sinks.append(logger_instance)

    try:
        summary = BackupRunner(settings, log_sink=combine_sinks(sinks)).run()
    except BackupAbortedError as e:
        if logger_instance:
            logger_instance.log_failure(str(e))
        raise

    if logger_instance:
        logger_instance.log_summary(summary)
    backup_console.display_summary(summary)
    return summary


if __name__ == "__main__":
    app()
