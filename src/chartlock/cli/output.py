"""Rich output formatting helpers for the chartlock CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from chartlock.core.lockfile import Lock
from chartlock.exceptions import ChartLockError, ResolutionError

console = Console()
err_console = Console(stderr=True)

_SOURCE_LABELS = {
    "": "[dim]charts/[/dim]",
}


def _source(repository: str) -> str:
    return _SOURCE_LABELS.get(repository, repository)


def print_lock_summary(lock: Lock) -> None:
    """Print the resolved dependencies of a lock.

    Args:
        lock: The lock produced by resolution.
    """
    console.print(
        Panel("[bold green]Resolution successful[/bold green]",
              title="Dependency Resolution")
    )
    table = Table(show_header=True, header_style="bold")
    table.add_column("Dependency", style="bold")
    table.add_column("Repository")
    table.add_column("Version")
    for dep in lock.dependencies:
        table.add_row(dep.name, _source(dep.repository), dep.version)
    console.print(table)
    console.print(f"Digest: [dim]{lock.digest}[/dim]")


def print_error(exc: ChartLockError) -> None:
    """Print a chartlock error, naming the dependency when known."""
    title = "Resolution failed" if isinstance(exc, ResolutionError) else "Error"
    err_console.print(Panel(f"[bold red]{title}[/bold red]", title="chartlock"))
    dependency = getattr(exc, "dependency", "")
    if dependency:
        err_console.print(f"  [red]- {escape(dependency)}: {escape(str(exc))}[/red]")
    else:
        err_console.print(f"  [red]- {escape(str(exc))}[/red]")


def print_stale(lock_path: str, added: list[str], removed: list[str]) -> None:
    """Print why a lock no longer matches its chart."""
    console.print(
        Panel(f"[bold yellow]{lock_path} is out of date[/bold yellow]",
              title="Lock Verification")
    )
    for name in added:
        console.print(f"  [green]+ {name}[/green] (declared, not locked)")
    for name in removed:
        console.print(f"  [red]- {name}[/red] (locked, no longer declared)")
    if not added and not removed:
        console.print("  Declared versions or sources changed since the lock was generated.")
