"""Main CLI entry point using Typer."""

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..aws.inventory import GroupInventory
from ..cleanup.audit import AuditStorage
from ..cleanup.cleaner import GroupCleaner
from ..cleanup.deleter import ResourceDeleter
from ..cleanup.errors import DeleteError
from ..models.resource import DELETION_ORDER
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="groupsweep",
    help="Delete the EC2 instances and capacity reservations of an AWS resource group",
    add_completion=False,
)

console = Console()

# Global config
config: Optional[Config] = None


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    resource_group: Optional[str] = typer.Option(None, "--resource-group", "-g", help="Resource group to clean up"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="Concurrent deletes per batch (default: 4)"),
    max_retries: Optional[int] = typer.Option(
        None, "--max-retries", help="Delete attempts per resource when rate limited (default: 5)"
    ),
    initial_delay_ms: Optional[int] = typer.Option(
        None, "--initial-delay-ms", help="First backoff delay in milliseconds (default: 2000)"
    ),
    storage_path: Optional[str] = typer.Option(
        None,
        "--storage-path",
        help="Base path for audit logs (default: ~/.groupsweep or $GROUPSWEEP_STORAGE_PATH)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """Groupsweep - rate-limit aware resource group cleanup.

    Run without a command to delete every EC2 instance in the group, then every
    capacity reservation.
    """
    global config

    try:
        config = Config.load()
    except ValueError as e:
        console.print(f"✗ Invalid configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Override with CLI options
    overrides = {
        "resource_group": resource_group,
        "region": region,
        "aws_profile": profile,
        "batch_size": batch_size,
        "max_retries": max_retries,
        "initial_delay_ms": initial_delay_ms,
        "storage_path": storage_path,
    }
    for attribute, value in overrides.items():
        if value is not None:
            setattr(config, attribute, value)

    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    if no_color:
        console.no_color = True

    if ctx.invoked_subcommand is None:
        run_cleanup()


def _build_cleaner() -> GroupCleaner:
    """Create a cleaner from the global config, exiting on bad configuration."""
    if not config.resource_group:
        console.print(
            "✗ Error: No resource group given. Use --resource-group or set GROUPSWEEP_RESOURCE_GROUP",
            style="bold red",
        )
        raise typer.Exit(code=1)

    try:
        settings = config.settings()
    except ValueError as e:
        console.print(f"✗ Invalid settings: {e}", style="bold red")
        raise typer.Exit(code=1)

    return GroupCleaner(
        inventory=GroupInventory(config.resource_group, region=config.region, aws_profile=config.aws_profile),
        deleter=ResourceDeleter(aws_profile=config.aws_profile),
        audit_storage=AuditStorage(config.audit_path),
        settings=settings,
    )


def run_cleanup() -> None:
    """Run the two-phase cleanup and report the result."""
    cleaner = _build_cleaner()

    console.print(
        f"\n🧹 Cleaning up resource group: [bold cyan]{config.resource_group}[/bold cyan] "
        f"(batch size {cleaner.settings.batch_size}, up to {cleaner.settings.max_retries} attempts, "
        f"at most {cleaner.settings.worst_case_delay_ms / 1000:g}s backoff per resource)\n"
    )

    try:
        operation, records = cleaner.run()
    except DeleteError as e:
        console.print(f"✗ Cleanup aborted: {e}", style="bold red")
        logger.exception("Terminal deletion failure")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"✗ Error during cleanup: {e}", style="bold red")
        logger.exception("Error in cleanup")
        raise typer.Exit(code=2)

    for resource_class in DELETION_ORDER:
        count = operation.phase_counts.get(resource_class.value, 0)
        console.print(f"✓ Removed {count} {resource_class.label}(s)", style="green")

    console.print(
        f"\n[bold green]✓ Cleanup complete[/bold green]: {operation.succeeded_count} resource(s) deleted "
        f"in {operation.duration_seconds or 0:.1f}s (operation {operation.operation_id})"
    )


@app.command()
def preview():
    """Show what a cleanup would delete, without deleting anything."""
    cleaner = _build_cleaner()

    try:
        operation, found = cleaner.preview()
    except Exception as e:
        console.print(f"✗ Error listing resources: {e}", style="bold red")
        logger.exception("Error in preview command")
        raise typer.Exit(code=2)

    if operation.total_resources == 0:
        console.print(f"✓ Resource group [cyan]{config.resource_group}[/cyan] has nothing to delete")
        return

    table = Table(title=f"Resources in {config.resource_group} (deletion order)")
    table.add_column("Phase", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("ID")
    table.add_column("Name")

    for phase, resource_class in enumerate(DELETION_ORDER, start=1):
        for resource in found.get(resource_class, []):
            table.add_row(str(phase), resource.resource_type, resource.resource_id, resource.name)

    console.print(table)
    console.print(f"\n{operation.total_resources} resource(s) would be deleted (operation {operation.operation_id})")


@app.command()
def history(
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Number of operations to show"),
):
    """List past cleanup operations from the audit log."""
    storage = AuditStorage(config.audit_path)
    operations = storage.query_operations()[-limit:]

    if not operations:
        console.print("No cleanup operations recorded yet")
        return

    table = Table(title="Cleanup history")
    table.add_column("Operation")
    table.add_column("Timestamp")
    table.add_column("Group", style="cyan")
    table.add_column("Mode")
    table.add_column("Status")
    table.add_column("Deleted", justify="right")
    table.add_column("Failed", justify="right")

    for data in reversed(operations):
        op = data["operation"]
        status_style = {"completed": "green", "failed": "red"}.get(op["status"], "yellow")
        table.add_row(
            op["operation_id"],
            op["timestamp"],
            op["resource_group"],
            op["mode"],
            f"[{status_style}]{op['status']}[/{status_style}]",
            str(op["succeeded_count"]),
            str(op["failed_count"]),
        )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"groupsweep version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
